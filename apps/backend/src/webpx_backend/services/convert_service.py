"""
Request handling for single-file conversions.

Every step of a request is gated by the previous one. Sanity and validation
errors are caught here and turned into a StageFailure naming the check that
was running, so they never reach the client as unhandled faults.
"""
from __future__ import annotations

import dataclasses
import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Mapping

from webpx_converter import convert
from webpx_shared import paths, sanity, validate
from webpx_shared.config import WebPExpressConfig, generate_wod_options, load_config_and_fix
from webpx_shared.converters import get_converter_by_id
from webpx_shared.errors import SanityCheckError, ValidationError
from webpx_shared.protocol import (
    AjaxConvertParams,
    AjaxResponse,
    CheckStage,
    ConversionRequest,
    ConversionResult,
    StageFailure,
)

from ..config import Config
from ..nonce import CONVERT_NONCE_ACTION, NonceManager

logger = logging.getLogger(__name__)

ConvertDelegate = Callable[..., Mapping[str, Any]]

INVALID_NONCE_MESSAGE = "Invalid security nonce (it has probably expired - try refreshing)"


def merge_converter_options(
    general: Mapping[str, Any], converter_specific: Mapping[str, Any]
) -> dict[str, Any]:
    """
    Merge a converter's own options over the general conversion options.

    Converter-specific options win. The single converter run must not see
    the converter list, so "converters" is dropped.
    """
    # Unconfirmed whether general options should instead win. Kept as-is.
    merged = {**general, **converter_specific}
    merged.pop("converters", None)
    return merged


def _filesize(path: Path | str) -> int | None:
    try:
        return os.path.getsize(path)
    except OSError:
        return None


@dataclass(frozen=True)
class AjaxInput:
    """Checked fields of a convert-file AJAX request."""
    filename: str
    converter_id: str | None = None
    config_overrides: dict[str, Any] | None = None


class ConvertService:
    """Converts single files on request, from the AJAX endpoint or the CLI."""

    def __init__(
        self,
        config: Config,
        nonces: NonceManager | None = None,
        delegate: ConvertDelegate | None = None,
    ):
        self._config = config
        self._nonces = nonces or NonceManager(config.nonce_secret, config.nonce_max_age)
        self._delegate = delegate if delegate is not None else convert

    @property
    def config(self) -> Config:
        return self._config

    def load_config(self) -> WebPExpressConfig:
        return load_config_and_fix(self._config.config_file)

    def get_destination(self, source: Path | str, config: WebPExpressConfig | None = None) -> Path:
        if config is None:
            config = self.load_config()
        return paths.get_destination(
            source,
            config.destination_folder,
            config.destination_extension,
            self._config.content_dir,
            self._config.upload_dir,
            doc_root=self._config.document_root,
            custom_dir=config.destination_folder_custom,
        )

    def find_source(self, destination: Path | str, config: WebPExpressConfig | None = None) -> Path | None:
        """
        Determine the source of a destination, see webpx_shared.paths.find_source.

        Returns None if the destination is not sane, is outside the document
        root, or no source exists.
        """
        try:
            destination = sanity.abs_path_is_in_doc_root(str(destination), self._config.document_root)
        except SanityCheckError as e:
            logger.debug("find_source rejected %s: %s", destination, e)
            return None

        if config is None:
            config = self.load_config()

        return paths.find_source(
            destination,
            config.destination_folder,
            config.destination_extension,
            self._config.content_dir,
            upload_dir=self._config.upload_dir,
            doc_root=self._config.document_root,
            custom_dir=config.destination_folder_custom,
        )

    def _check_conversion(
        self,
        source: Path | str,
        config: Any,
        convert_options: Any,
        converter_id: str | None,
    ) -> ConversionRequest | StageFailure:
        doc_root = self._config.document_root
        checking = CheckStage.SOURCE
        try:
            checked_source = sanity.abs_path_exists_and_is_file(str(source))

            checking = CheckStage.CONFIG
            if config is None:
                config = self.load_config()
            if not isinstance(config, WebPExpressConfig):
                raise SanityCheckError("file is corrupt")

            checking = CheckStage.CONFIG_OPTIONS
            if convert_options is None:
                wod_options = generate_wod_options(config)
                convert_options = wod_options.get("webp-convert", {}).get("convert")
            if not isinstance(convert_options, Mapping):
                raise SanityCheckError("conversion options are missing")

            checking = CheckStage.DESTINATION
            try:
                destination = self.get_destination(checked_source, config)
            except ValueError as e:
                raise SanityCheckError(str(e)) from e
            checked_destination = sanity.abs_path_is_in_doc_root(str(destination), doc_root)

            checking = CheckStage.LOG_DIR
            log_dir = sanity.abs_path_is_in_doc_root(str(self._config.log_dir), doc_root)

        except SanityCheckError as e:
            return StageFailure(checking, "sanity", str(e))

        return ConversionRequest(
            source=Path(checked_source),
            destination=Path(checked_destination),
            options=convert_options,
            log_dir=Path(log_dir),
            converter_id=converter_id,
        )

    def convert_file(
        self,
        source: Path | str,
        config: WebPExpressConfig | None = None,
        convert_options: Mapping[str, Any] | None = None,
        converter_id: str | None = None,
    ) -> ConversionResult:
        """Check the input, then hand the conversion to the delegate."""
        checked = self._check_conversion(source, config, convert_options, converter_id)
        if isinstance(checked, StageFailure):
            logger.info("Not converting %s: %s", source, checked.message)
            return ConversionResult.from_failure(checked)

        raw = self._delegate(
            checked.source,
            checked.destination,
            checked.options,
            checked.log_dir,
            checked.converter_id,
        )
        result = ConversionResult.from_delegate(raw)

        if result.success:
            result = dataclasses.replace(
                result,
                original_size=_filesize(checked.source),
                webp_size=_filesize(checked.destination),
            )
        return result

    def _check_ajax_params(self, params: AjaxConvertParams) -> AjaxInput | StageFailure:
        fields = params.fields()
        checking = CheckStage.FILENAME_ARG
        try:
            validate.post_has_key(fields, "filename")
            filename = sanity.unslash(params.filename)
            if not os.path.isabs(filename):
                filename = str(self._config.document_root / filename)

            checking = CheckStage.CONVERTER_ARG
            converter_id = None
            if params.converter is not None:
                converter_id = validate.is_converter_id(params.converter.strip())

            checking = CheckStage.CONFIG_OVERRIDES_ARG
            overrides = None
            if params.config_overrides is not None:
                overrides_json = sanity.no_control_chars(params.config_overrides)
                # Quotes may arrive escaped by the client
                overrides_json = overrides_json.replace('\\"', '"')
                overrides_json = sanity.is_json_object(overrides_json)
                overrides = json.loads(overrides_json)

        except SanityCheckError as e:
            return StageFailure(checking, "sanity", str(e))
        except ValidationError as e:
            return StageFailure(checking, "validation", str(e))

        return AjaxInput(filename=filename, converter_id=converter_id, config_overrides=overrides)

    def process_ajax_convert_file(self, params: AjaxConvertParams) -> AjaxResponse:
        """Handle the convert-file AJAX call."""
        if not self._nonces.verify(params.nonce, CONVERT_NONCE_ACTION):
            return AjaxResponse.error(INVALID_NONCE_MESSAGE, status=403)

        checked = self._check_ajax_params(params)
        if isinstance(checked, StageFailure):
            logger.info("Rejected convert request: %s", checked.message)
            return AjaxResponse.error(checked.message)

        if checked.config_overrides is None:
            result = self.convert_file(checked.filename)
            return AjaxResponse.from_result(result)

        config = self.load_config().merged(checked.config_overrides)

        if checked.converter_id is None:
            result = self.convert_file(checked.filename, config)
            return AjaxResponse.from_result(result)

        converter = get_converter_by_id(config, checked.converter_id)
        if converter is None:
            return AjaxResponse.error("Converter could not be loaded")

        # Regenerate the options so the overrides take effect
        general = generate_wod_options(config)["webp-convert"]["convert"]
        options = merge_converter_options(general, converter["options"])

        result = self.convert_file(checked.filename, config, options, checked.converter_id)
        return AjaxResponse.from_result(result)
