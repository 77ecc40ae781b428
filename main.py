"""Main entry point for the Event Platform services."""

import argparse

SERVICES = {
    "events": ("event_platform.main:event_app", 8080),
    "bookings": ("event_platform.main:booking_app", 8081),
}


def main(argv=None):
    """Run one of the services with uvicorn."""
    import uvicorn

    parser = argparse.ArgumentParser(description="Run an Event Platform service")
    parser.add_argument("service", choices=sorted(SERVICES), help="Service to run")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=None, help="Defaults to 8080 for events, 8081 for bookings")
    parser.add_argument("--reload", action="store_true", help="Reload on code changes (development)")
    args = parser.parse_args(argv)

    app_path, default_port = SERVICES[args.service]
    uvicorn.run(app_path, host=args.host, port=args.port or default_port, reload=args.reload, log_config=None)


if __name__ == "__main__":
    main()
