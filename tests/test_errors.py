"""
Unit tests for the error model, message sanitization and the pydantic
validation error mapper.
"""

import pytest
from pydantic import ValidationError

from models.errors import (
    ErrorCode,
    ToolError,
    create_db_error,
    create_db_not_found_error,
    create_internal_error,
    create_validation_error,
    is_not_found,
    not_found,
    sanitize_path,
    sanitize_sql_error,
    sanitize_stack_trace,
)
from schemas.engagements import BookContractorRequest
from schemas.shortlists import CreateShortlistRequest
from utils.pydantic_error_mapper import map_pydantic_validation_error


class TestToolError:
    def test_to_dict_shape(self):
        error = ToolError(code=ErrorCode.DB_ERROR, message="Database error: locked", retryable=True)
        assert error.to_dict() == {
            "error": {"code": "DB_ERROR", "message": "Database error: locked", "retryable": True}
        }

    def test_is_exception_with_message(self):
        error = create_validation_error("Invalid limit")
        assert isinstance(error, Exception)
        assert str(error) == "Invalid limit"
        assert error.retryable is False

    def test_internal_error_is_retryable_and_keeps_cause(self):
        cause = RuntimeError("boom\nTraceback line")
        error = create_internal_error(str(cause), original_error=cause)
        assert error.code == ErrorCode.INTERNAL_ERROR
        assert error.retryable is True
        assert error.message == "Internal error: boom"
        assert error.original_error is cause


class TestNotFoundData:
    @pytest.mark.parametrize("entity", ["Contractor", "Job", "Shortlist", "Shortlist item"])
    def test_not_found_shape(self, entity):
        assert not_found(entity) == {"error": f"{entity} not found"}

    def test_is_not_found_distinguishes_faults_and_results(self):
        assert is_not_found(not_found("Job")) is True
        assert is_not_found(create_db_error("x").to_dict()) is False
        assert is_not_found({"job": {}, "total_matches": 0, "contractors": []}) is False
        assert is_not_found(None) is False


class TestSanitization:
    def test_absolute_path_reduced_to_basename(self):
        assert sanitize_path("/srv/data/contractors.db") == "contractors.db"
        assert sanitize_path("data/contractors.db") == "data/contractors.db"

    def test_db_not_found_hides_directories(self):
        error = create_db_not_found_error("/srv/secret/contractors.db")
        assert error.code == ErrorCode.DB_NOT_FOUND
        assert error.message == "Database not found: contractors.db"

    def test_sql_fragments_removed(self):
        message = sanitize_sql_error("near 'x': syntax error in SELECT id FROM contractors")
        assert "FROM contractors" not in message
        assert "[SQL query]" in message

    def test_stack_trace_first_line_only(self):
        assert sanitize_stack_trace("first\nsecond\nthird") == "first"

    def test_db_error_prefix(self):
        error = create_db_error("database is locked", retryable=True)
        assert error.message == "Database error: database is locked"
        assert error.retryable is True


class TestPydanticMapping:
    def test_missing_field(self):
        with pytest.raises(ValidationError) as exc_info:
            CreateShortlistRequest.model_validate({})
        error = map_pydantic_validation_error(exc_info.value)
        assert error.code == ErrorCode.VALIDATION_ERROR
        assert error.message == "Missing required parameter: 'name'"

    def test_validator_message_passed_through(self):
        with pytest.raises(ValidationError) as exc_info:
            CreateShortlistRequest.model_validate({"name": ""})
        error = map_pydantic_validation_error(exc_info.value)
        assert error.message == "Invalid name: cannot be empty"

    def test_type_error_names_field(self):
        with pytest.raises(ValidationError) as exc_info:
            CreateShortlistRequest.model_validate({"name": 42})
        error = map_pydantic_validation_error(exc_info.value)
        assert error.message.startswith("Invalid name: ")

    def test_counts_further_issues(self):
        with pytest.raises(ValidationError) as exc_info:
            BookContractorRequest.model_validate({})
        error = map_pydantic_validation_error(exc_info.value)
        assert error.message.startswith("Missing required parameter: 'contractor_id'")
        assert error.message.endswith("(and 1 more)")
