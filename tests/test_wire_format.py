"""Response models must serialize with stable camelCase keys."""

from __future__ import annotations

import re
from typing import Type

import pytest
from pydantic import BaseModel, ValidationError

from apps.result_server.main import ErrorResponse, HealthResponse
from stepcheck.core.config import ProgressMode
from stepcheck.core.report import ExecutionDiagnostic, ProgressReport

CAMEL_CASE = re.compile(r"^[a-z]+(?:[A-Z][a-z]*)*$")
WIRE_MODELS: tuple[Type[BaseModel], ...] = (ProgressReport, ExecutionDiagnostic, HealthResponse, ErrorResponse)


@pytest.mark.parametrize("model", WIRE_MODELS, ids=lambda model: model.__name__)
def test_serialized_keys_are_camel_case(model: Type[BaseModel]) -> None:
    offenders = [
        name
        for name, info in model.model_fields.items()
        if not CAMEL_CASE.match(info.serialization_alias or info.alias or name)
    ]
    assert offenders == [], f"{model.__name__} exposes non-camelCase keys: {offenders}"


def test_report_accepts_field_names_and_aliases() -> None:
    by_name = ProgressReport(mode=ProgressMode.DECLARED, passed_count=2, passed_percent=50)
    by_alias = ProgressReport.model_validate({"mode": "declared", "passedCount": 2, "passedPercent": 50})

    assert by_name == by_alias
    assert by_alias.to_payload()["passedCount"] == 2


def test_report_is_immutable_and_bounded() -> None:
    report = ProgressReport(mode=ProgressMode.EXECUTED)

    with pytest.raises(ValidationError):
        report.total = 3
    with pytest.raises(ValidationError):
        ProgressReport(mode=ProgressMode.EXECUTED, passed_percent=101)
