# example_usage.py
import datetime as dt
import logging
from typing import Dict, List, Optional, Union

from contract_model import (
    DataModel,
    Field,
    ValidationError,
    ValidatorMode,
    field_validator,
    model_validator,
    parse_input,
)

logging.basicConfig(level=logging.DEBUG)


class Observable(DataModel):
    value: str
    kind: str = "domain"


class Finding(DataModel):
    finding_id: str
    title: str
    event_dtg: dt.datetime
    severity: str = "low"
    confidence: float = 0.0
    observables: List[Observable] = Field(default_factory=list)
    tactics: List[str] = Field(alias="mitre_attack_tactics", default_factory=list)
    score: Union[int, str] = 0
    notes: Optional[str] = None

    @field_validator(mode=ValidatorMode.BEFORE)
    @classmethod
    def check_severity(cls, severity):
        if severity not in ("low", "medium", "high"):
            raise ValueError(f"unknown severity {severity!r}")
        return severity

    @model_validator(mode=ValidatorMode.AFTER)
    def clamp_confidence(self):
        self.confidence = min(max(self.confidence, 0.0), 1.0)


class Report(DataModel):
    findings: List[Finding]
    totals: Dict[str, int] = Field(default_factory=dict)


# 1) read raw input (Mapping / Path / JSON literal)
raw = parse_input("""
{
  "findings": [{
    "finding_id": "123e4567-e89b-12d3-a456-426614174000",
    "title": "Suspicious DNS query",
    "event_dtg": "2025-06-07T12:34:56",
    "severity": "high",
    "confidence": "0.85",
    "observables": [{"value": "evil.example.com"}],
    "mitre_attack_tactics": ["TA0001"]
  }],
  "totals": {"dns": "123"}
}
""")

# 2) validate & coerce
report = Report.from_dict(raw)
print(report.findings[0])
print(report.to_json())

# 3) every field error is reported at once
try:
    Report(findings=[{"title": 1, "event_dtg": "yesterday"}], totals={"dns": "many"})
except ValidationError as exc:
    print(exc)
