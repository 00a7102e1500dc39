import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from routers.admin import router as admin_router
from routers.health import router as health_router
from routers.questions import router as questions_router
from routers.session import router as session_router

logger = logging.getLogger("quizbank")
logging.basicConfig(level=logging.INFO)

app = FastAPI(title="Quizbank – Quiz Session API")

# Allow calls from the quiz front-end dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*", "x-quiz-user", "x-admin-token"],
)


@app.get("/")
def health_root():
    return {"ok": True}


app.include_router(questions_router)  # /subjects, /questions/...
app.include_router(session_router)  # /session/...
app.include_router(admin_router)  # /admin/...
app.include_router(health_router)  # /health/...
