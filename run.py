import uvicorn

from job_board.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "job_board.app:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )
