import uvicorn

from common.config import get_settings


def main() -> None:
    settings = get_settings()
    uvicorn.run("services.bookings.app:app", host=settings.bookings_service_host, port=settings.bookings_service_port)


if __name__ == "__main__":
    main()
