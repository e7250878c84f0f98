from jsonlens.core.exceptions import BackendError
from jsonlens.core.json_models import (
    FormattingFailure,
    FormattingOptions,
    FormattingSuccess,
    ValidationFailure,
    ValidationSuccess,
)
from jsonlens.services.json_service import JsonValidationService


def test_default_backend_round_trip():
    service = JsonValidationService()
    assert isinstance(service.validate('{"a": 1}'), ValidationSuccess)
    assert service.is_valid("[]")
    assert not service.is_valid("[")


def test_transport_failure_becomes_error_result():
    def invoke(command, payload):
        raise BackendError("validator offline")

    service = JsonValidationService(invoke)
    result = service.validate("[]")
    assert isinstance(result, ValidationFailure)
    assert result.message == "System error: validator offline"
    assert isinstance(service.minify("[]"), FormattingFailure)


def test_blank_exception_text_uses_type_name():
    def invoke(command, payload):
        raise OSError()

    result = JsonValidationService(invoke).format("[]")
    assert result.message == "System error: OSError"


def test_options_are_sent_on_the_wire():
    calls = []

    def invoke(command, payload):
        calls.append((command, payload))
        return {"type": "Success", "formatted": "[\n    1\n]", "size": 9}

    result = JsonValidationService(invoke).format("[1]", FormattingOptions(indent_width=4, trailing_newline=False))
    assert isinstance(result, FormattingSuccess)
    assert calls == [("format_json", {"input": "[1]", "options": {"indent": 4, "trailing_newline": False}})]


def test_garbage_response():
    result = JsonValidationService(lambda command, payload: None).validate("[]")
    assert isinstance(result, ValidationFailure)


def test_size_of():
    assert JsonValidationService.size_of("é") == 2
