"""Application entry points wiring the envelope adapter to the engine."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING

from patchform.adapters.function import build_response, parse_request
from patchform.config import get_engine_config
from patchform.domain.composition import compose

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from patchform.adapters.function import RunFunctionRequest, RunFunctionResponse
    from patchform.config import EngineConfig
    from patchform.domain.composition import ConditionEvaluator

log = getLogger(__name__)


def run_function(
    payload: RunFunctionRequest | Mapping[str, object],
    *,
    config: EngineConfig | None = None,
    condition_evaluator: ConditionEvaluator | None = None,
) -> RunFunctionResponse:
    """Run one function request and return the response envelope."""

    effective_config = config or get_engine_config()
    request = parse_request(payload)
    response = compose(request, config=effective_config, condition_evaluator=condition_evaluator)
    log.info(
        "Finished run: desired-resources=%d, results=%d, fatal=%s",
        len(response.desired.resources),
        len(response.results),
        response.fatal,
    )
    return build_response(response)


def render_files(
    request_path: Path,
    *,
    input_path: Path | None = None,
    config: EngineConfig | None = None,
    condition_evaluator: ConditionEvaluator | None = None,
) -> RunFunctionResponse:
    """Run the request stored at ``request_path``, optionally replacing its input."""

    payload = _read_json_object(request_path)
    if input_path is not None:
        payload["input"] = _read_json_object(input_path)
    return run_function(payload, config=config, condition_evaluator=condition_evaluator)


def _read_json_object(path: Path) -> dict[str, object]:
    data = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{path} must contain a JSON object")
    return data
