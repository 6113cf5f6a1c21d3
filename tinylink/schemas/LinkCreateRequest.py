from pydantic import BaseModel, HttpUrl, TypeAdapter, ValidationError, field_validator
from typing import Optional

from tinylink.utils.encoding import is_valid_code

MAX_URL_LENGTH = 2048

_http_url = TypeAdapter(HttpUrl)

# Request DTOs
class LinkCreateRequest(BaseModel):
    target_url: str
    code: Optional[str] = None

    @field_validator('target_url')
    def validate_target_url(cls, v):
        v = v.strip()
        if len(v) > MAX_URL_LENGTH:
            raise ValueError(f'target_url must be at most {MAX_URL_LENGTH} characters')

        # Only allow absolute http/https URLs
        if not (v.lower().startswith('http://') or v.lower().startswith('https://')):
            raise ValueError('Invalid target_url. Use http(s) URL.')
        try:
            _http_url.validate_python(v)
        except ValidationError:
            raise ValueError('Invalid target_url. Use http(s) URL.')

        # Stored exactly as given, HttpUrl would normalise it
        return v

    @field_validator('code', mode='before')
    def validate_code(cls, v):
        if v is None:
            return None
        if not isinstance(v, str):
            raise ValueError('code must be a string')
        v = v.strip()
        if not v:
            return None
        if not is_valid_code(v):
            raise ValueError('code must match ^[A-Za-z0-9]{6,8}$')
        return v
