"""Pydantic schema for the assistant's business settings (settings slot).

Stored with camelCase keys. Every field has a default so a bare
``SettingsRecord()`` is a complete, usable record.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

DEFAULT_TIMEZONE = "Asia/Kuala_Lumpur"
WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")

FALLBACK_REPLY_EN = "Sorry, I couldn't understand your question. We will have someone contact you soon."


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DayHours(_CamelModel):
    enabled: bool = True
    start: str = "09:00"
    end: str = "18:00"


class BusinessHours(_CamelModel):
    tz: str = DEFAULT_TIMEZONE
    start: str = "09:00"
    end: str = "18:00"
    monday: DayHours = Field(default_factory=DayHours)
    tuesday: DayHours = Field(default_factory=DayHours)
    wednesday: DayHours = Field(default_factory=DayHours)
    thursday: DayHours = Field(default_factory=DayHours)
    friday: DayHours = Field(default_factory=DayHours)
    saturday: DayHours = Field(default_factory=DayHours)
    sunday: DayHours = Field(default_factory=DayHours)

    def day(self, weekday: str) -> DayHours:
        """Hours for a lowercase weekday name."""
        if weekday not in WEEKDAYS:
            raise ValueError(f"unknown weekday {weekday!r}")
        return getattr(self, weekday)


class ResponseTemplate(_CamelModel):
    greeting: str
    fallback: str
    busy: str = ""


class LanguageRule(_CamelModel):
    id: str
    name: str
    description: str = ""
    trigger_languages: list[str] = Field(default_factory=list)
    response_language: str
    enabled: bool = True


def _default_language_rules() -> list[LanguageRule]:
    return [
        LanguageRule(
            id="chinese_rule",
            name="Chinese Response Rule",
            description="Reply in Chinese when customer speaks Chinese",
            trigger_languages=["zh", "chinese", "中文"],
            response_language="zh",
        ),
        LanguageRule(
            id="english_rule",
            name="English Response Rule",
            description="Reply in English for English, Malay, and Indian languages",
            trigger_languages=["en", "english", "malay", "malaysia", "indian", "hindi", "tamil"],
            response_language="en",
        ),
    ]


def _default_response_templates() -> dict[str, ResponseTemplate]:
    return {
        "en": ResponseTemplate(
            greeting="Hello! Welcome to our homestay service. How can I help you today?",
            fallback=FALLBACK_REPLY_EN,
            busy="[We are experiencing high volume, there may be slight delays]",
        ),
        "zh": ResponseTemplate(
            greeting="您好！欢迎咨询我们的民宿服务。",
            fallback="抱歉，我没有理解您的问题。我们会尽快安排人员联系您。",
            busy="【目前咨询量较大，可能会有轻微延迟】",
        ),
    }


class AiRules(_CamelModel):
    language_detection: bool = True
    auto_language_response: bool = True
    language_rules: list[LanguageRule] = Field(default_factory=_default_language_rules)
    response_templates: dict[str, ResponseTemplate] = Field(default_factory=_default_response_templates)


class WhatsAppConfig(_CamelModel):
    phone_number: str = ""
    api_token: str = ""
    webhook_token: str = ""
    webhook_url: str = ""
    auto_reply: bool = True
    response_delay: int = 1
    max_messages_per_hour: int = 1000


class SettingsRecord(_CamelModel):
    """Business settings consumed by the message-answering side of the app."""

    always_on: bool = True
    business_hours: BusinessHours = Field(default_factory=BusinessHours)
    fallback_reply: str = FALLBACK_REPLY_EN
    answer_mode: Literal["AI", "Simple"] = "AI"
    ai_provider: str = "OpenAI"
    embedding_model: str = "text-embedding-3-small"
    chat_model: str = "gpt-3.5-turbo"
    api_key_enc: str = ""
    similarity_threshold: float = Field(default=0.3, ge=0, le=1)
    confidence_threshold: float = Field(default=0.6, ge=0, le=1)
    preferred_lang: str = "auto"
    max_tokens: int = 512
    temperature: float = 0.2
    busy_mode: bool = False
    ai_rules: AiRules = Field(default_factory=AiRules)
    whatsapp: WhatsAppConfig = Field(default_factory=WhatsAppConfig)

    @classmethod
    def default(cls, timezone: str = DEFAULT_TIMEZONE) -> "SettingsRecord":
        return cls(business_hours=BusinessHours(tz=timezone))

    def to_storage(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)
