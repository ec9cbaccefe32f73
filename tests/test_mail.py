import smtplib

from classroom_api.services.mail import ConsoleMailer, SmtpMailer, send_safely


class ExplodingMailer:
    def send(self, to_address, subject, html_body):
        raise smtplib.SMTPServerDisconnected("gone")


def test_send_safely_swallows_and_logs_failures(caplog):
    with caplog.at_level("ERROR"):
        assert send_safely(ExplodingMailer(), "a@example.com", "Hi", "<p>x</p>") is False
    assert "Failed to send" in caplog.text


def test_send_safely_reports_success(caplog):
    with caplog.at_level("INFO"):
        assert send_safely(ConsoleMailer(), "a@example.com", "Hi", "<p>hello</p>") is True
    assert "a@example.com" in caplog.text


def test_smtp_message_is_html():
    mailer = SmtpMailer("smtp.example.com", 587, "user", "pw", from_address="noreply@example.com")
    msg = mailer.build_message("a@example.com", "Reset Your Password", "<a href='x'>Reset</a>")

    assert msg["To"] == "a@example.com"
    assert msg["Subject"] == "Reset Your Password"
    assert "noreply@example.com" in msg["From"]
    html = msg.get_payload()[0]
    assert html.get_content_type() == "text/html"


def test_smtp_mailer_talks_to_server(monkeypatch):
    calls = []

    class FakeSMTP:
        def __init__(self, host, port, timeout=None):
            calls.append(("connect", host, port))

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

        def starttls(self, context=None):
            calls.append(("starttls",))

        def login(self, user, password):
            calls.append(("login", user))

        def sendmail(self, from_addr, to_addrs, msg):
            calls.append(("sendmail", from_addr, tuple(to_addrs)))

    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)
    SmtpMailer("smtp.example.com", 587, "user", "pw", from_address="noreply@example.com").send(
        "a@example.com", "Hi", "<p>x</p>"
    )

    assert calls == [
        ("connect", "smtp.example.com", 587),
        ("starttls",),
        ("login", "user"),
        ("sendmail", "noreply@example.com", ("a@example.com",)),
    ]
