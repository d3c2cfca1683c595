class UIKeys:
    """Keys for UI widgets in ``st.session_state``."""

    PAYMENT_EMAIL = "ui.payment.email"
    PAYMENT_AMOUNT = "ui.payment.amount_usd"
    PAYMENT_COUNTRY = "ui.payment.country"
    FIELD_PREFIX = "ui.field."
    UPLOAD_PREFIX = "ui.upload."

    @classmethod
    def field(cls, track: str, name: str) -> str:
        """Return the widget key for form field ``name`` on ``track``."""

        return f"{cls.FIELD_PREFIX}{track}.{name}"

    @classmethod
    def upload(cls, track: str, slot: str) -> str:
        """Return the file-uploader key for media ``slot`` on ``track``."""

        return f"{cls.UPLOAD_PREFIX}{track}.{slot}"


class StateKeys:
    """Keys for data stored in ``st.session_state``."""

    SESSION_ID = "session_id"
    VIEW = "app.view"
    TRACK = "app.track"
    APPLICATION_SESSION = "app.application_session"
    PAYMENT_ERRORS = "app.payment_errors"
    PAYMENT_REFERENCE = "app.payment_reference"
    NOTICES = "app.notices"
