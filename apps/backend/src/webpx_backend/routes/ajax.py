"""AJAX conversion routes."""

from __future__ import annotations

import json
import logging
import math
import re
from typing import Any

from flask import Blueprint, Response, abort, current_app, request

from webpx_shared.protocol import AjaxConvertParams, AjaxResponse

logger = logging.getLogger(__name__)

ajax_bp = Blueprint("ajax", __name__)

CONVERT_FILE_ACTION = "webpexpress_convert_file"

_NUMERIC = re.compile(r"^\s*[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$")
_INTEGER = re.compile(r"^\s*[+-]?\d+$")
# Integers outside the 64-bit range are rendered as floats
_INT_MAX = 2**63 - 1
_INT_MIN = -(2**63)


def numeric_check(value: Any) -> Any:
    """Render numeric-looking strings as numbers, recursively."""
    if isinstance(value, dict):
        return {k: numeric_check(v) for k, v in value.items()}
    if isinstance(value, list):
        return [numeric_check(v) for v in value]
    if isinstance(value, str) and _NUMERIC.match(value):
        number = float(value)
        if not math.isfinite(number):
            return value
        if _INTEGER.match(value):
            integer = int(value)
            if _INT_MIN <= integer <= _INT_MAX:
                return integer
        return number
    return value


def render(response: AjaxResponse) -> Response:
    body = json.dumps(numeric_check(response.body), indent=4, ensure_ascii=False)
    return current_app.response_class(body, status=response.status, mimetype="application/json")


def _convert_file() -> Response:
    service = current_app.config["convert_service"]
    params = AjaxConvertParams.from_form(request.form)
    return render(service.process_ajax_convert_file(params))


@ajax_bp.post("/wp-admin/admin-ajax.php")
def admin_ajax():
    """Dispatch on the "action" field, the way admin-ajax.php does."""
    action = request.args.get("action") or request.form.get("action")
    if action != CONVERT_FILE_ACTION:
        abort(400, description=f"Unknown action: {action}")
    return _convert_file()


@ajax_bp.post("/api/convert-file")
def convert_file():
    """Convert a single file."""
    return _convert_file()
