import uvicorn

from server.api.settings import Settings


def main() -> None:
    settings = Settings.from_env()

    uvicorn.run(
        "server.api.app:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()
