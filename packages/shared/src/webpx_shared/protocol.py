"""
Data passed between the request handler and the conversion delegate.

Flow:
    AJAX form -> AjaxConvertParams (untrusted, validated by the handler)
    Handler -> Delegate: ConversionRequest (validated paths and options)
    Delegate -> Handler: result dict {success, msg, log}
    Handler -> Client: ConversionResult (serialized with to_dict)
"""
from __future__ import annotations

import enum
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal, Mapping

FailureKind = Literal["sanity", "validation"]


class CheckStage(str, enum.Enum):
    """Which check was running when a request was rejected."""
    SOURCE = "source path"
    CONFIG = "configuration file"
    CONFIG_OPTIONS = "configuration file (options)"
    DESTINATION = "destination"
    LOG_DIR = "conversion log dir"
    FILENAME_ARG = '"filename" argument'
    CONVERTER_ARG = '"converter" argument'
    CONFIG_OVERRIDES_ARG = '"config-overrides" argument'


@dataclass(frozen=True)
class StageFailure:
    """A failed sanity or validation check, tagged with its stage."""
    stage: CheckStage
    kind: FailureKind
    reason: str

    @property
    def message(self) -> str:
        if self.kind == "validation":
            return f"Validation failed for {self.stage.value}: {self.reason}"
        return f"Sanitation check failed for {self.stage.value}: {self.reason}"


@dataclass(frozen=True)
class AjaxConvertParams:
    """
    Raw fields of a convert-file AJAX request.

    Every field is untrusted and may be missing. Built from the form by the
    HTTP layer so that the handler never reads the framework's request.
    """
    nonce: str | None = None
    filename: str | None = None
    converter: str | None = None
    config_overrides: str | None = None

    @classmethod
    def from_form(cls, form: Mapping[str, Any]) -> "AjaxConvertParams":
        return cls(
            nonce=form.get("nonce"),
            filename=form.get("filename"),
            converter=form.get("converter"),
            config_overrides=form.get("config-overrides"),
        )

    def fields(self) -> dict[str, str]:
        """The supplied fields, keyed by their form names."""
        raw = {
            "nonce": self.nonce,
            "filename": self.filename,
            "converter": self.converter,
            "config-overrides": self.config_overrides,
        }
        return {k: v for k, v in raw.items() if v is not None}


@dataclass(frozen=True)
class ConversionRequest:
    """Validated input for a single conversion."""
    source: Path
    destination: Path
    options: Mapping[str, Any]
    log_dir: Path
    converter_id: str | None = None


@dataclass(frozen=True)
class ConversionResult:
    """Outcome of a single conversion attempt."""
    success: bool
    message: str
    log: str = ""
    original_size: int | None = None
    webp_size: int | None = None

    @classmethod
    def from_failure(cls, failure: StageFailure) -> "ConversionResult":
        return cls(success=False, message=failure.message, log="")

    @classmethod
    def from_delegate(cls, result: Mapping[str, Any]) -> "ConversionResult":
        """Build from the dict returned by the conversion delegate."""
        return cls(
            success=result.get("success") is True,
            message=str(result.get("msg", result.get("message", ""))),
            log=str(result.get("log", "")),
        )

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {
            "success": self.success,
            "msg": self.message,
            "log": self.log,
        }
        if self.success:
            d["filesize-original"] = self.original_size
            d["filesize-webp"] = self.webp_size
        return d


@dataclass(frozen=True)
class AjaxResponse:
    """What the HTTP layer should send back for an AJAX call."""
    status: int
    body: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def error(cls, message: str, status: int = 400) -> "AjaxResponse":
        # Same shape as wp_send_json_error()
        return cls(status=status, body={"success": False, "data": message})

    @classmethod
    def from_result(cls, result: ConversionResult) -> "AjaxResponse":
        return cls(status=200, body=result.to_dict())
