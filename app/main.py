from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from accounts.registration import RegistrationHandler, RegistrationRequest
from accounts.store import AccountStore, build_account_store
from app.errors import (
    ConfigurationError,
    ConflictError,
    StoreError,
    UpstreamError,
    ValidationError,
)
from assistant.gemini import GeminiClient, LanguageService
from assistant.relay import AssistantRelay, ChatRequest
from config.settings import Settings, get_settings


logger = logging.getLogger("portal")

UPSTREAM_GUIDANCE = "Check if the model is retired or your API key is active."

_UNSET: Any = object()


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="[%(asctime)s] %(levelname)s - %(message)s",
    )
    # httpx logs every request URL at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[AccountStore] = _UNSET,
    upstream: Optional[LanguageService] = None,
) -> FastAPI:
    """Build the API with its handlers wired to ``settings``.

    ``store`` and ``upstream`` default to the MongoDB store and the Gemini
    client; tests pass fakes instead. An explicit ``store=None`` runs with
    registration disabled, same as a missing ``MONGO_URL``.
    """

    settings = settings or get_settings()
    if store is _UNSET:
        store = build_account_store(settings)

    registration = RegistrationHandler(store, settings)
    relay = AssistantRelay(upstream or GeminiClient(settings), settings)

    app = FastAPI(title="Women's Health Portal API", version="1.0.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials="*" not in settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_path = f"{settings.api_prefix}/auth/register"
    chat_path = f"{settings.api_prefix}/chat"

    @app.exception_handler(RequestValidationError)
    async def _invalid_body(request: Request, exc: RequestValidationError) -> JSONResponse:
        # Unparseable bodies get the same 400 shape as missing fields
        if request.url.path == chat_path:
            return JSONResponse(status_code=400, content={"error": "Message is required"})
        return JSONResponse(status_code=400, content={"message": "Invalid request body"})

    @app.post(register_path)
    def register(req: RegistrationRequest) -> Any:
        try:
            return registration.register(req)
        except ValidationError as exc:
            return JSONResponse(status_code=exc.http_status, content={"message": exc.message})
        except ConflictError:
            return JSONResponse(status_code=400, content={"message": "Email already exists"})
        except StoreError as exc:
            logger.error("Registration store failure: %s", exc.message)
            return JSONResponse(status_code=500, content={"message": "Server Error"})
        except Exception as exc:
            logger.exception("Registration failed: %s", exc)
            return JSONResponse(status_code=500, content={"message": "Server Error"})

    @app.post(chat_path)
    def chat(req: ChatRequest) -> Any:
        try:
            return {"reply": relay.reply(req.message)}
        except ValidationError:
            return JSONResponse(status_code=400, content={"error": "Message is required"})
        except ConfigurationError:
            logger.error("Chat rejected: GEMINI_API_KEY is not configured")
            return JSONResponse(status_code=500, content={"error": "API Key missing"})
        except UpstreamError as exc:
            return JSONResponse(
                status_code=exc.status_code,
                content={
                    "error": "Google API Error",
                    "details": exc.upstream_message or UPSTREAM_GUIDANCE,
                },
            )
        except Exception as exc:
            logger.exception("Chat processing failed: %s", exc)
            return JSONResponse(status_code=500, content={"error": "Internal Server Error"})

    @app.get("/health")
    def health() -> Dict[str, Any]:
        return {
            "status": "ok",
            "store": "connected" if store is not None else "disabled",
            "model": settings.gemini_model,
        }

    return app


configure_logging(get_settings())
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    logger.info("Server starting on port %s | Using: %s", settings.port, settings.gemini_model)
    uvicorn.run("app.main:app", host="0.0.0.0", port=settings.port)
