import logging
import signal
import sys

from skillswap import create_app, shutdown

logger = logging.getLogger('skillswap.run')


def main():
    try:
        app = create_app()
    except Exception:
        logger.exception("Startup failed")
        sys.exit(1)

    def handle_signal(signum, frame):
        logger.info("Received signal %s, shutting down", signum)
        sys.exit(0)

    signal.signal(signal.SIGTERM, handle_signal)

    logger.info("Running in %s mode", 'development' if app.config['DEBUG'] else 'production')
    logger.info("Allowed CORS Origins: %s", app.config['CORS_ORIGINS'])
    try:
        app.run(debug=app.config['DEBUG'], host="0.0.0.0", port=app.config['PORT'], use_reloader=False)
    except KeyboardInterrupt:
        pass
    finally:
        shutdown(app)


if __name__ == '__main__':
    main()
