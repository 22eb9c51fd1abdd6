"""Small validation framework used for board profiles and CLI options."""
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, List, Optional, Pattern, Union

from ..string_utils import safe_format


@dataclass
class ValidationResult:
    """Result of a validation operation."""

    valid: bool = True
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    def add_error(self, error: str) -> None:
        self.errors.append(error)
        self.valid = False

    def add_warning(self, warning: str) -> None:
        self.warnings.append(warning)

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        """Merge another validation result into this one."""
        self.valid = self.valid and other.valid
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        return self


class BaseValidator(ABC):
    """Base class for all validators."""

    def __init__(self, field_name: str = "value"):
        self.field_name = field_name

    @abstractmethod
    def validate(self, value: Any) -> ValidationResult:
        """Validate the input value."""

    def __call__(self, value: Any) -> ValidationResult:
        return self.validate(value)


class RequiredValidator(BaseValidator):
    """Fail on None or a blank string."""

    def validate(self, value: Any) -> ValidationResult:
        result = ValidationResult()
        if value is None or (isinstance(value, str) and not value.strip()):
            result.add_error(f"{self.field_name} is not defined")
        return result


class RegexValidator(BaseValidator):
    """Validate that the whole value matches a regex pattern."""

    def __init__(
        self,
        pattern: Union[str, Pattern[str]],
        error_message: Optional[str] = None,
        field_name: str = "value",
    ):
        super().__init__(field_name)
        self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern
        self.error_message = error_message

    def validate(self, value: Any) -> ValidationResult:
        result = ValidationResult()
        if not self.pattern.fullmatch(str(value)):
            template = self.error_message or "{field} does not match required pattern"
            result.add_error(safe_format(template, field=self.field_name, value=value))
        return result


class CompositeValidator(BaseValidator):
    """Run validators in order, stopping at the first failure."""

    def __init__(self, validators: List[BaseValidator], field_name: str = "value"):
        super().__init__(field_name)
        self.validators = validators

    def validate(self, value: Any) -> ValidationResult:
        result = ValidationResult()
        for validator in self.validators:
            result.merge(validator.validate(value))
            if not result.valid:
                break
        return result


JTAG_INDEX_RE = re.compile(r"^[0-9]+$")
SIZE_RE = re.compile(r"^[0-9]+[KMG]?$")


def get_jtag_index_validator(field_name: str = "JTAG_DEVICE_INDEX") -> BaseValidator:
    return CompositeValidator(
        [
            RequiredValidator(field_name),
            RegexValidator(
                JTAG_INDEX_RE,
                error_message="Invalid {field}: {value} (must be a number)",
                field_name=field_name,
            ),
        ],
        field_name=field_name,
    )


def get_size_validator(field_name: str = "DEFAULT_FLASH_SIZE") -> BaseValidator:
    return CompositeValidator(
        [
            RequiredValidator(field_name),
            RegexValidator(
                SIZE_RE,
                error_message=(
                    "Invalid {field}: {value} (expected format: 16M, 128K, etc.)"
                ),
                field_name=field_name,
            ),
        ],
        field_name=field_name,
    )
