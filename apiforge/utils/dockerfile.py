from typing import Optional

DOCKERFILES = {
    "fastapi": """FROM python:3.11-slim
ENV PYTHONDONTWRITEBYTECODE=1 \\
    PYTHONUNBUFFERED=1
WORKDIR /app
COPY requirements.txt .
RUN pip install --no-cache-dir -r requirements.txt
COPY . .
EXPOSE {port}
CMD ["uvicorn", "app.main:app", "--host", "0.0.0.0", "--port", "{port}", "--workers", "{workers}"]
""",
}

def generate_dockerfile(framework: str = "fastapi", port: Optional[int] = None, workers: int = 1) -> str:
    """Generate a Dockerfile for an emitted service"""
    template = DOCKERFILES.get(framework, DOCKERFILES["fastapi"])
    return template.format(port=port or 8000, workers=workers)
