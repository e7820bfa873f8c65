import logging

from . import create_app


def main():
    logging.basicConfig(level=logging.INFO)
    app = create_app()

    port = app.config.get('PORT', 5000)
    print("\n" + "=" * 60)
    print("Email Marketer")
    print("=" * 60)
    print(f"API:      http://localhost:{port}/api")
    print(f"Health:   http://localhost:{port}/health")
    print(f"Webhook:  http://localhost:{port}/api/webhooks/mailgun")
    print("=" * 60 + "\n")

    app.run(host='0.0.0.0', port=port)


if __name__ == '__main__':
    main()
