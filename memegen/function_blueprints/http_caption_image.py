from typing import Dict, Optional

import azure.functions as func
from pydantic import ValidationError

from memegen.functions.caption_image import CaptionImageService, get_caption_service
from memegen.shared.logging_utils import info as log_info, error as log_error, exception as log_exception
from memegen.specs.common.errors import CLIENT_ERRORS, FetchError, MemeGenError
from memegen.specs.models.caption import CaptionRequest

PNG_MIMETYPE = "image/png"
CAPTION_FIELDS = ("source", "top", "bottom", "white")

bp = func.Blueprint()


def _read_params(req: func.HttpRequest) -> Dict[str, Optional[str]]:
    """Merge query string and form body; form values win over the query string."""
    params: Dict[str, Optional[str]] = {}
    for name in CAPTION_FIELDS:
        if req.params.get(name) is not None:
            params[name] = req.params.get(name)
    if req.method.upper() == "POST":
        try:
            form = req.form
        except ValueError as exc:
            log_error(None, "caption:bad_form", error=str(exc))
            form = {}
        for name in CAPTION_FIELDS:
            if form.get(name) is not None:
                params[name] = form.get(name)
    return params


def _text_response(message: str, status_code: int) -> func.HttpResponse:
    return func.HttpResponse(message + "\n", status_code=status_code, mimetype="text/plain")


def handle_caption_request(
    req: func.HttpRequest,
    service: Optional[CaptionImageService] = None,
) -> func.HttpResponse:
    params = _read_params(req)
    try:
        caption_req = CaptionRequest.from_params(params)
    except ValidationError as exc:
        log_error(None, "caption:invalid_request", error=str(exc))
        return _text_response(str(FetchError()), 400)

    try:
        if service is None:
            service = get_caption_service()
    except MemeGenError as exc:
        log_error(None, "caption:service_unavailable", code=exc.code, error=str(exc), details=exc.details)
        return _text_response("Internal error", 500)

    try:
        result = service.get_image(caption_req)
    except CLIENT_ERRORS as exc:
        log_error(None, "caption:failed", code=exc.code, error=str(exc), details=exc.details)
        return _text_response(str(exc), 400)
    except Exception:
        log_exception(None, "caption:unexpected_error")
        return _text_response("Internal error", 500)

    log_info(result.key, "caption:served", cached=result.cached)
    return func.HttpResponse(
        body=result.body,
        status_code=200,
        mimetype=PNG_MIMETYPE,
        headers={"X-Cache": "HIT" if result.cached else "MISS"},
    )


@bp.function_name(name="caption_image")
@bp.route(route="caption", methods=["GET", "POST"], auth_level=func.AuthLevel.ANONYMOUS)
def caption_image(req: func.HttpRequest) -> func.HttpResponse:
    return handle_caption_request(req)
