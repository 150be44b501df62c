"""
Validation framework for pymalmo mission documents.

Generic validators (positions, numbers) plus MissionValidator, which checks a
document tree against the rules of the mission schema: required values,
cardinalities, enumerations, value types, and the few cross-field rules the
schema imposes.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, List, Optional, Union
import math

from pymalmo.classes.base import XML, SchemaObject
from pymalmo.classes.mission_objects import Mission, XML_NAMESPACE
from pymalmo.classes.world import DrawSphere, ServerQuitFromTimeUp, Time
from pymalmo.classes.agents import Grid, VideoProducer, ModifierList, Placement


class ValidationSeverity(Enum):
    """Severity levels for validation issues."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass
class ValidationIssue:
    """Represents a single validation issue."""
    severity: ValidationSeverity
    message: str
    field: Optional[str] = None
    value: Optional[Any] = None
    suggestion: Optional[str] = None
    code: Optional[str] = None


@dataclass
class ValidationResult:
    """Comprehensive validation result."""
    is_valid: bool
    issues: List[ValidationIssue]
    warnings_count: int
    errors_count: int
    critical_count: int

    @property
    def has_warnings(self) -> bool:
        return self.warnings_count > 0

    @property
    def has_errors(self) -> bool:
        return self.errors_count > 0

    @property
    def has_critical(self) -> bool:
        return self.critical_count > 0

    def get_issues_by_severity(self, severity: ValidationSeverity) -> List[ValidationIssue]:
        """Get all issues of a specific severity."""
        return [issue for issue in self.issues if issue.severity == severity]

    def get_issues_by_code(self, code: str) -> List[ValidationIssue]:
        return [issue for issue in self.issues if issue.code == code]

    def get_summary(self) -> str:
        """Get a summary of validation results."""
        if self.is_valid:
            return "✓ Validation passed"

        parts = []
        if self.critical_count > 0:
            parts.append(f"{self.critical_count} critical")
        if self.errors_count > 0:
            parts.append(f"{self.errors_count} errors")
        if self.warnings_count > 0:
            parts.append(f"{self.warnings_count} warnings")

        return f"✗ Validation failed: {', '.join(parts)}"


class MissionValidationError(ValueError):
    """Raised when a mission document does not satisfy the schema."""

    def __init__(self, result: ValidationResult):
        self.result = result
        lines = [result.get_summary()]
        lines.extend(format_issue(issue) for issue in result.issues
                     if issue.severity in (ValidationSeverity.ERROR, ValidationSeverity.CRITICAL))
        super().__init__("\n".join(lines))


def format_issue(issue: ValidationIssue) -> str:
    """One-line rendering of an issue, e.g. 'ERROR [Mission/About]: ...'."""
    field_info = f" [{issue.field}]" if issue.field else ""
    return f"{issue.severity.value.upper()}{field_info}: {issue.message}"


class BaseValidator(ABC):
    """Abstract base class for all validators."""

    def __init__(self, strict: bool = False):
        """
        Initialize validator.

        Args:
            strict: If True, warnings are treated as errors
        """
        self.strict = strict
        self.issues: List[ValidationIssue] = []

    def add_issue(
        self,
        severity: ValidationSeverity,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        suggestion: Optional[str] = None,
        code: Optional[str] = None
    ):
        """Add a validation issue."""
        self.issues.append(ValidationIssue(severity, message, field, value, suggestion, code))

    def validate(self, data: Any) -> ValidationResult:
        """
        Validate data and return comprehensive result.

        Args:
            data: Data to validate

        Returns:
            ValidationResult with all issues found
        """
        self.issues.clear()
        self._validate_impl(data)
        return self._build_result()

    @abstractmethod
    def _validate_impl(self, data: Any):
        """Implement specific validation logic."""
        pass

    def _build_result(self) -> ValidationResult:
        """Build the final validation result."""
        warnings = sum(1 for issue in self.issues if issue.severity == ValidationSeverity.WARNING)
        errors = sum(1 for issue in self.issues if issue.severity == ValidationSeverity.ERROR)
        critical = sum(1 for issue in self.issues if issue.severity == ValidationSeverity.CRITICAL)

        # In strict mode, warnings become errors
        if self.strict:
            errors += warnings
            warnings = 0

        return ValidationResult(
            is_valid=errors == 0 and critical == 0,
            issues=self.issues.copy(),
            warnings_count=warnings,
            errors_count=errors,
            critical_count=critical
        )

    def _merge(self, result: ValidationResult, field: Optional[str]):
        """Copy issues from a sub-validator, prefixing their field path."""
        for issue in result.issues:
            sub_field = field if issue.field is None else f"{field}.{issue.field}"
            self.add_issue(issue.severity, issue.message, field=sub_field, value=issue.value,
                           suggestion=issue.suggestion, code=issue.code)


class PositionValidator(BaseValidator):
    """Validator for (x, y, z) positions."""

    def _validate_impl(self, data: Any):
        if not isinstance(data, (tuple, list)) or len(data) != 3:
            self.add_issue(
                ValidationSeverity.CRITICAL,
                f"Position must be an (x, y, z) triple, got {data!r}",
                value=data,
                suggestion="Use (x, y, z) tuple format"
            )
            return

        for coord, name in zip(data, "xyz"):
            if coord is None:
                # Reported by the schema walk as a missing attribute
                continue
            if isinstance(coord, bool) or not isinstance(coord, (int, float)):
                self.add_issue(
                    ValidationSeverity.ERROR,
                    f"Coordinate {name} must be numeric, got {type(coord).__name__}",
                    field=name,
                    value=coord,
                    code="bad-type"
                )
            elif not math.isfinite(coord):
                self.add_issue(
                    ValidationSeverity.ERROR,
                    f"Coordinate {name} must be finite, got {coord}",
                    field=name,
                    value=coord,
                    suggestion="Use finite numeric values",
                    code="not-finite"
                )


class NumericValidator(BaseValidator):
    """Validator for numeric values with range and divisibility checks."""

    def __init__(
        self,
        strict: bool = False,
        min_value: Optional[Union[int, float]] = None,
        max_value: Optional[Union[int, float]] = None,
        allow_negative: bool = True,
        allow_zero: bool = True,
        multiple_of: Optional[int] = None
    ):
        super().__init__(strict)
        self.min_value = min_value
        self.max_value = max_value
        self.allow_negative = allow_negative
        self.allow_zero = allow_zero
        self.multiple_of = multiple_of

    def _validate_impl(self, data: Any):
        if data is None:
            return
        if isinstance(data, bool) or not isinstance(data, (int, float)):
            # Type problems are reported by the schema walk
            return

        if not math.isfinite(data):
            self.add_issue(ValidationSeverity.ERROR, f"Value must be finite, got {data}",
                           value=data, code="not-finite")
            return

        if not self.allow_negative and data < 0:
            self.add_issue(ValidationSeverity.ERROR, f"Negative values not allowed, got {data}",
                           value=data, suggestion="Use a non-negative value", code="out-of-range")

        if not self.allow_zero and data == 0:
            self.add_issue(ValidationSeverity.ERROR, "Zero value not allowed",
                           value=data, suggestion="Use a non-zero value", code="out-of-range")

        if self.min_value is not None and data < self.min_value:
            self.add_issue(ValidationSeverity.WARNING, f"Value {data} below minimum {self.min_value}",
                           value=data, suggestion=f"Use value >= {self.min_value}", code="out-of-range")

        if self.max_value is not None and data > self.max_value:
            self.add_issue(ValidationSeverity.WARNING, f"Value {data} above maximum {self.max_value}",
                           value=data, suggestion=f"Use value <= {self.max_value}", code="out-of-range")

        if self.multiple_of and data % self.multiple_of != 0:
            self.add_issue(ValidationSeverity.WARNING, f"Value {data} is not divisible by {self.multiple_of}",
                           value=data, suggestion=f"Use a multiple of {self.multiple_of}", code="not-multiple")


def _type_ok(value: Any, type_: type) -> bool:
    if type_ is bool:
        return isinstance(value, bool)
    if type_ is int:
        return isinstance(value, int) and not isinstance(value, bool)
    if type_ is float:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    return isinstance(value, type_)


class MissionValidator(BaseValidator):
    """
    Checks a Mission tree against the schema.

    Usage:
        result = MissionValidator().validate(mission)
        if not result.is_valid:
            raise MissionValidationError(result)

    Args:
        strict: If True, warnings are treated as errors
        report: Optional ParseReport from the XML codec; unknown and duplicated
            elements, unknown attributes and a missing namespace are reported as errors.
    """

    def __init__(self, strict: bool = False, report: Optional[Any] = None):
        super().__init__(strict)
        self.report = report

    def _validate_impl(self, data: Any):
        if not isinstance(data, Mission):
            self.add_issue(ValidationSeverity.CRITICAL,
                           f"Expected a Mission document, got {type(data).__name__}", code="bad-type")
            return

        if self.report is not None:
            self._check_report(self.report)
        self._check_object(data, Mission.TAG)
        self._check_agent_names(data)

    # --- Parse report ---
    def _check_report(self, report):
        if report.namespace != XML_NAMESPACE:
            self.add_issue(ValidationSeverity.ERROR,
                           "Mission element is not in the mission namespace",
                           field=Mission.TAG, value=report.namespace,
                           suggestion=f'Add xmlns="{XML_NAMESPACE}" to the root element',
                           code="missing-namespace")
        for path in report.unknown_elements:
            self.add_issue(ValidationSeverity.ERROR, "Element is not allowed by the schema",
                           field=path, code="unknown-element")
        for path in report.unknown_attributes:
            self.add_issue(ValidationSeverity.ERROR, "Attribute is not allowed by the schema",
                           field=path, code="unknown-attribute")
        for path in report.duplicate_elements:
            self.add_issue(ValidationSeverity.ERROR, "Element may appear at most once",
                           field=path, code="duplicate-element")

    # --- Generic schema walk ---
    def _check_object(self, obj: SchemaObject, path: str):
        for f in fields(obj):
            kind = f.metadata.get(XML)
            if kind in (None, "any", "any-attribute"):
                continue
            value = getattr(obj, f.name)

            if kind in ("attribute", "element"):
                name = f"@{f.metadata['name']}" if kind == "attribute" else f.metadata["name"]
                self._check_simple(value, f.metadata, f"{path}/{name}")
            elif kind == "elements":
                for i, v in enumerate(value):
                    self._check_simple(v, f.metadata, f"{path}/{f.metadata['name']}[{i}]")
            elif kind == "child":
                types = f.metadata["types"]
                if value is None:
                    if f.metadata.get("required"):
                        self.add_issue(ValidationSeverity.ERROR,
                                       f"Missing required element (one of {', '.join(types)})",
                                       field=path, code="missing-required")
                    continue
                tag = self._tag_of(value, types, path)
                if tag is not None:
                    self._check_object(value, f"{path}/{tag}")
            else:  # children
                types = f.metadata["types"]
                if len(value) < f.metadata.get("min", 0):
                    self.add_issue(ValidationSeverity.ERROR,
                                   f"Expected at least {f.metadata['min']} of {', '.join(types)}, got {len(value)}",
                                   field=path, code="too-few")
                for i, v in enumerate(value):
                    tag = self._tag_of(v, types, path)
                    if tag is not None:
                        self._check_object(v, f"{path}/{tag}[{i}]")

        self._check_rules(obj, path)

    def _tag_of(self, value, types, path) -> Optional[str]:
        for tag, cls in types.items():
            if type(value) is cls:
                return tag
        self.add_issue(ValidationSeverity.ERROR,
                       f"{type(value).__name__} is not allowed here; expected one of {', '.join(types)}",
                       field=path, code="bad-type")
        return None

    def _check_simple(self, value, meta, path: str):
        if value is None:
            if meta.get("required"):
                self.add_issue(ValidationSeverity.ERROR, "Missing required value",
                               field=path, code="missing-required")
            return
        if not _type_ok(value, meta["type"]):
            self.add_issue(ValidationSeverity.ERROR,
                           f"Expected {meta['type'].__name__}, got {type(value).__name__}",
                           field=path, value=value, code="bad-type")
            return
        choices = meta.get("choices")
        if choices and value not in choices:
            self.add_issue(ValidationSeverity.ERROR,
                           f"'{value}' is not one of {', '.join(choices)}",
                           field=path, value=value, code="invalid-enum")

    # --- Cross-field rules ---
    def _check_numeric(self, value, path: str, **kwargs):
        self._merge(NumericValidator(**kwargs).validate(value), path)

    def _check_rules(self, obj: SchemaObject, path: str):
        if isinstance(obj, ServerQuitFromTimeUp):
            self._check_numeric(obj.time_limit_ms, f"{path}/@timeLimitMs", allow_negative=False, allow_zero=False)
        elif isinstance(obj, Time):
            self._check_numeric(obj.start_time, f"{path}/StartTime", min_value=0, max_value=24000)
        elif isinstance(obj, DrawSphere):
            self._check_numeric(obj.radius, f"{path}/@radius", allow_negative=False)
        elif isinstance(obj, VideoProducer):
            self._check_numeric(obj.width, f"{path}/Width", allow_negative=False, allow_zero=False, multiple_of=4)
            self._check_numeric(obj.height, f"{path}/Height", allow_negative=False, allow_zero=False, multiple_of=2)
        elif isinstance(obj, Placement):
            self._merge(PositionValidator().validate((obj.x, obj.y, obj.z)), path)
        elif isinstance(obj, Grid):
            self._check_grid(obj, path)
        elif isinstance(obj, ModifierList):
            for i, verb in enumerate(obj.commands):
                if isinstance(verb, str) and not verb.strip():
                    self.add_issue(ValidationSeverity.ERROR, "Command verb is empty",
                                   field=f"{path}/command[{i}]", code="empty-verb")

    def _check_grid(self, grid: Grid, path: str):
        if grid.min is None or grid.max is None:
            return
        for axis in "xyz":
            lo, hi = getattr(grid.min, axis), getattr(grid.max, axis)
            if isinstance(lo, int) and isinstance(hi, int) and lo > hi:
                self.add_issue(ValidationSeverity.WARNING,
                               f"Grid '{grid.name}' has min.{axis}={lo} greater than max.{axis}={hi}",
                               field=path, suggestion="Swap the corners", code="inverted-grid")

    def _check_agent_names(self, mission: Mission):
        seen = set()
        for i, section in enumerate(mission.agent_sections):
            if section.name is None:
                continue
            if section.name in seen:
                self.add_issue(ValidationSeverity.WARNING,
                               f"Agent name '{section.name}' is used more than once",
                               field=f"{Mission.TAG}/AgentSection[{i}]/Name", code="duplicate-agent-name")
            seen.add(section.name)
