# Load environment variables early
from dotenv import load_dotenv

load_dotenv()

from typing import Optional

from pydantic import BaseModel, Field, field_validator

from finserv.config.settings import CHAT_MAX_MESSAGE_LENGTH


class RegisterRequest(BaseModel):
    """Registration body.

    Fields are optional at the schema level so that a missing or blank field
    produces the gateway's "All fields are required" answer rather than a
    generic schema error.
    """

    name: Optional[str] = Field(None, max_length=200, examples=["Ada Lovelace"])
    email: Optional[str] = Field(None, max_length=320, examples=["ada@example.com"])
    password: Optional[str] = Field(None, examples=["correct horse battery staple"])

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "name": "Ada Lovelace",
                    "email": "ada@example.com",
                    "password": "correct horse battery staple",
                }
            ]
        }
    }


class LoginRequest(BaseModel):
    email: Optional[str] = Field(None, max_length=320, examples=["ada@example.com"])
    password: Optional[str] = Field(None, examples=["correct horse battery staple"])


class ChatRequest(BaseModel):
    """Message relayed to the AI provider."""

    message: str = Field(
        ...,
        min_length=1,
        max_length=CHAT_MAX_MESSAGE_LENGTH,
        description="The user's question for the finance assistant",
        examples=["How much should I keep in an emergency fund?"],
    )

    @field_validator("message")
    @classmethod
    def validate_message(cls, v):
        if not v.strip():
            raise ValueError("Message cannot be empty or only whitespace")
        return v
