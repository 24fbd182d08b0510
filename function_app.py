
import os
import logging
import azure.functions as func

from memegen.function_blueprints.http_caption_image import bp as caption_image_bp
from memegen.shared.config import get_render_context

app = func.FunctionApp(http_auth_level=func.AuthLevel.ANONYMOUS)


def _configure_logging() -> None:
    lvl = (os.getenv("AZURE_SDK_LOG_LEVEL") or "").upper()
    if lvl:
        level = getattr(logging, lvl, logging.INFO)
        logging.getLogger("azure").setLevel(level)
        logging.getLogger("azure.storage").setLevel(level)
    own = (os.getenv("MEMEGEN_LOG_LEVEL") or "INFO").upper()
    logging.getLogger("memegen").setLevel(getattr(logging, own, logging.INFO))


_configure_logging()

# Font is read once at startup and shared by every request.
get_render_context()

app.register_functions(caption_image_bp)
