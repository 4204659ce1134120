import uvicorn

from wl_app.core.config import get_settings


def main() -> None:
    s = get_settings()
    uvicorn.run("wl_app.main:app", host=s.host, port=s.port, log_level=s.log_level.lower())


if __name__ == "__main__":
    main()
