"""Unit tests for the shared record model configuration."""

from enum import Enum

import pytest
from pydantic import ValidationError

from infrastructure.models import InfrastructureModel


class Status(str, Enum):
    ACTIVE = "active"
    ERROR = "error"


class Record(InfrastructureModel):
    name: str
    status: Status = Status.ACTIVE
    attempts: int = 0


@pytest.mark.unit
class TestInfrastructureModel:
    def test_enums_stay_enum_members(self):
        record = Record(name="mail", status="error")

        assert record.status is Status.ERROR
        assert record.model_dump()["status"] is Status.ERROR

    def test_json_dump_uses_values(self):
        assert Record(name="mail").model_dump(mode="json")["status"] == "active"

    def test_assignment_is_validated(self):
        record = Record(name="mail")

        with pytest.raises(ValidationError):
            record.attempts = "many"

    def test_from_attributes(self):
        class Row:
            name = "sms"
            status = "active"
            attempts = 2

        record = Record.model_validate(Row())

        assert record.attempts == 2

    def test_strings_are_not_stripped(self):
        assert Record(name="  padded ").name == "  padded "
