"""HTTP API: email job extraction, document tailoring, opportunities and applications."""
from __future__ import annotations

from datetime import date
from typing import Callable, Optional

from fastapi import Depends, FastAPI, Header, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from careerdesk import __version__
from careerdesk.auth import authenticate
from careerdesk.catalog import list_static_opportunities
from careerdesk.errors import CareerDeskError
from careerdesk.extractor import extract_and_store
from careerdesk.generation import TextGenerator, generator_from_env
from careerdesk.log import get_logger
from careerdesk.mail import MailClient, gmail_client_factory
from careerdesk.models import JobDescriptor
from careerdesk.schemas import (
    ApplicationCreate,
    ApplicationStatus,
    ApplicationStatusUpdate,
    ExtractRequest,
    GenerateRequest,
    ProfileUpdate,
)
from careerdesk.store import Store
from careerdesk.tailoring import generate_documents

log = get_logger(__name__)

CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "GET, POST, PUT, PATCH, OPTIONS",
}


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code, headers=CORS_HEADERS)


def get_store(request: Request) -> Store:
    return request.app.state.store


def current_user(
    request: Request,
    authorization: Optional[str] = Header(default=None),
) -> str:
    return authenticate(request.app.state.store, authorization)


def get_generator(request: Request) -> TextGenerator:
    if request.app.state.generator is None:
        request.app.state.generator = generator_from_env()
    return request.app.state.generator


def create_app(
    store: Store | None = None,
    mail_client_factory: Callable[[str], MailClient] | None = None,
    generator: TextGenerator | None = None,
) -> FastAPI:
    """Build the API; collaborators are created once here and shared by all requests."""
    app = FastAPI(
        title="CareerDesk API",
        description="Extracts job postings from email and tailors cover letters and CVs.",
        version=__version__,
    )
    app.state.store = store or Store()
    app.state.mail_client_factory = mail_client_factory or gmail_client_factory
    app.state.generator = generator

    @app.middleware("http")
    async def cors(request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        try:
            response = await call_next(request)
        except Exception as exc:
            log.exception("%s %s crashed", request.method, request.url.path)
            return _error(500, str(exc) or "Internal server error")
        response.headers.update(CORS_HEADERS)
        return response

    @app.exception_handler(CareerDeskError)
    async def handle_app_error(request: Request, exc: CareerDeskError) -> JSONResponse:
        log.error("%s %s failed: %s", request.method, request.url.path, exc)
        return _error(exc.status_code, str(exc))

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in e.get('loc', ()))}: {e.get('msg', '')}"
            for e in exc.errors()
        )
        return _error(400, f"Invalid request: {problems}")

    @app.get("/health")
    def health():
        return {"status": "ok", "version": __version__}

    @app.post("/extract-gmail-jobs")
    def extract_gmail_jobs(
        body: ExtractRequest,
        request: Request,
        user_id: str = Depends(current_user),
        store: Store = Depends(get_store),
    ):
        mail = request.app.state.mail_client_factory(body.accessToken)
        try:
            jobs = extract_and_store(store, mail, user_id, body.sources)
        finally:
            mail.close()
        return {
            "message": "Successfully extracted job opportunities",
            "count": len(jobs),
            "jobs": [j.to_dict() for j in jobs],
        }

    @app.post("/generate-application-documents")
    def generate_application_documents(
        body: GenerateRequest,
        request: Request,
        user_id: str = Depends(current_user),
        store: Store = Depends(get_store),
    ):
        generator = get_generator(request)
        job = JobDescriptor(
            title=body.jobData.title,
            company=body.jobData.company,
            description=body.jobData.description,
            skills=list(body.jobData.skills),
        )
        documents = generate_documents(store, generator, user_id, job)
        return {
            "coverLetterPdf": documents.cover_letter,
            "cvPdf": documents.cv,
            "keywords": documents.keywords,
        }

    @app.get("/job-opportunities")
    def job_opportunities(
        user_id: str = Depends(current_user),
        store: Store = Depends(get_store),
    ):
        return {"jobs": [j.to_dict() for j in store.list_job_opportunities(user_id)]}

    @app.get("/opportunities")
    def opportunities(q: Optional[str] = None):
        return {"opportunities": [o.__dict__ for o in list_static_opportunities(q)]}

    @app.get("/profile")
    def profile(
        user_id: str = Depends(current_user),
        store: Store = Depends(get_store),
    ):
        return store.load_profile(user_id).to_dict()

    @app.put("/profile")
    def replace_profile(
        body: ProfileUpdate,
        user_id: str = Depends(current_user),
        store: Store = Depends(get_store),
    ):
        store.save_profile(user_id, body.model_dump())
        return store.load_profile(user_id).to_dict()

    @app.get("/applications")
    def list_applications(
        company: Optional[str] = None,
        status: Optional[ApplicationStatus] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        user_id: str = Depends(current_user),
        store: Store = Depends(get_store),
    ):
        apps = store.list_applications(
            user_id,
            company=company,
            status=status,
            start_date=start_date,
            end_date=end_date,
        )
        return {"applications": [a.to_dict() for a in apps]}

    @app.post("/applications", status_code=201)
    def create_application(
        body: ApplicationCreate,
        user_id: str = Depends(current_user),
        store: Store = Depends(get_store),
    ):
        fields = body.model_dump()
        application = store.record_application(
            user_id,
            job_title=fields.pop("job_title"),
            company_name=fields.pop("company_name"),
            **fields,
        )
        return application.to_dict()

    @app.patch("/applications/{application_id}")
    def update_application(
        application_id: int,
        body: ApplicationStatusUpdate,
        user_id: str = Depends(current_user),
        store: Store = Depends(get_store),
    ):
        return store.update_application_status(user_id, application_id, body.status).to_dict()

    return app
