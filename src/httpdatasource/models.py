"""
models.py
---------
Pydantic schemas for the data source inputs, the normalized response and the
diagnostics handed back to the host engine.
"""
import enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, SecretStr


class Severity(str, enum.Enum):
    ERROR = "error"
    WARNING = "warning"


# Inputs

class RequestSpec(BaseModel):
    url: str
    method: Optional[str] = None  # None: no explicit override
    request_headers: Dict[str, str] = Field(default_factory=dict)
    request_body: Optional[str] = None


class TLSMaterial(BaseModel):
    ca: Optional[str] = None
    client_crt: Optional[str] = None
    client_key: Optional[SecretStr] = None


# Outputs

class ResponseResult(BaseModel):
    id: str
    body: str
    response_headers: Dict[str, str] = Field(default_factory=dict)
    status_code: int
    content_type_warning: Optional[str] = None


class Diagnostic(BaseModel):
    severity: Severity
    summary: str
    detail: str = ""


class ReadResult(BaseModel):
    id: Optional[str] = None
    body: Optional[str] = None
    response_headers: Optional[Dict[str, str]] = None
    diagnostics: List[Diagnostic] = Field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(d.severity == Severity.ERROR for d in self.diagnostics)

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.severity == Severity.WARNING]
