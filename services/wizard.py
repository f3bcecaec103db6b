"""
Three-step loan application wizard as an explicit state machine.

    PERSONAL_INFO -> PAYMENT_METHOD -> REVIEW -> SUCCESS

States are immutable; every transition takes a WizardState and returns a new
one. Field values and errors are keyed by the camelCase names the API uses.
Each `next_step` only checks the fields belonging to the current step, and
`submit` re-checks everything (plus the terms checkbox) before calling out.
`WizardSession` keeps the current state for a live applicant and is what
prevents a second submit while one is pending.
"""
from __future__ import annotations

import logging
from enum import IntEnum
from typing import Any, Callable, Optional, Protocol

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from schemas.application import (
    ApplicationForm,
    Currency,
    LoanApplicationResponse,
    PaymentMethodType,
    UploadResponse,
)
from services.client import LoanApiError

logger = logging.getLogger(__name__)


class WizardStep(IntEnum):
    PERSONAL_INFO = 0
    PAYMENT_METHOD = 1
    REVIEW = 2
    SUCCESS = 3


STEP_LABELS = ("Personal Info", "Payment Method", "Review")

STEP_FIELDS: dict[WizardStep, tuple[str, ...]] = {
    WizardStep.PERSONAL_INFO: ("firstName", "lastName", "email", "income"),
    WizardStep.PAYMENT_METHOD: ("paymentMethodType", "iban"),
    WizardStep.REVIEW: (),
}

# Payment methods applicants can pick today
AVAILABLE_PAYMENT_METHODS = frozenset({PaymentMethodType.BANK_TRANSFER})


class ApplicationApi(Protocol):
    async def upload_file(self, filename: str, content: bytes, content_type: str = ...) -> UploadResponse: ...

    async def submit_application(self, payload: dict[str, Any]) -> LoanApplicationResponse: ...


class AttachedFile(BaseModel):
    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    model_config = {"frozen": True}


class WizardState(BaseModel):
    step: WizardStep = WizardStep.PERSONAL_INFO
    values: dict[str, Any] = Field(default_factory=dict)
    errors: dict[str, str] = Field(default_factory=dict)
    file: Optional[AttachedFile] = None
    submitting: bool = False
    cancelled: bool = False
    application_id: Optional[int] = None
    last_error: Optional[str] = None

    model_config = {"frozen": True}

    @property
    def is_terminal(self) -> bool:
        return self.step == WizardStep.SUCCESS

    @property
    def progress(self) -> float:
        """Fraction of the progress bar filled (1.0 on review and after)."""
        return min(self.step + 1, len(STEP_LABELS)) / len(STEP_LABELS)


def start_wizard(amount: int, duration: int, currency: Currency | str) -> WizardState:
    """Open the wizard with the loan terms chosen on the calculator."""
    return WizardState(
        values={
            "firstName": "",
            "lastName": "",
            "email": "",
            "income": 0,
            "amount": amount,
            "duration": duration,
            "currency": Currency(currency).value,
            "paymentMethodType": PaymentMethodType.BANK_TRANSFER.value,
            "iban": "",
            "termsAccepted": False,
        }
    )


def validate_fields(values: dict[str, Any]) -> dict[str, str]:
    """Validate the whole form; map each failing field to its first error message."""
    try:
        ApplicationForm.model_validate(values)
    except PydanticValidationError as e:
        errors: dict[str, str] = {}
        for err in e.errors():
            field = ".".join(str(p) for p in err["loc"])
            errors.setdefault(field, err["msg"])
        return errors
    return {}


def _step_errors(state: WizardState, step: WizardStep) -> dict[str, str]:
    fields = STEP_FIELDS[step]
    return {k: v for k, v in validate_fields(state.values).items() if k in fields}


def select_payment_method(state: WizardState, method: PaymentMethodType | str) -> WizardState:
    if state.is_terminal:
        return state
    method = PaymentMethodType(method)
    if method not in AVAILABLE_PAYMENT_METHODS:
        errors = {**state.errors, "paymentMethodType": f"{method.value} is not available yet"}
        return state.model_copy(update={"errors": errors})
    values = {**state.values, "paymentMethodType": method.value}
    errors = {k: v for k, v in state.errors.items() if k != "paymentMethodType"}
    return state.model_copy(update={"values": values, "errors": errors})


def update_fields(state: WizardState, **changes: Any) -> WizardState:
    """Set form values by snake_case name; clears stale errors for those fields."""
    if state.is_terminal:
        return state
    method = changes.pop("payment_method_type", None)
    if method is not None:
        state = select_payment_method(state, method)
    updates = {to_camel(k): v for k, v in changes.items()}
    values = {**state.values, **updates}
    errors = {k: v for k, v in state.errors.items() if k not in updates}
    return state.model_copy(update={"values": values, "errors": errors})


def attach_file(
    state: WizardState,
    filename: str,
    content: bytes,
    content_type: str = "application/octet-stream",
) -> WizardState:
    if state.is_terminal:
        return state
    return state.model_copy(
        update={"file": AttachedFile(filename=filename, content=content, content_type=content_type)}
    )


def next_step(state: WizardState) -> WizardState:
    """Advance one step if the current step's fields validate; otherwise stay and report errors."""
    if state.step >= WizardStep.REVIEW:
        return state
    errors = _step_errors(state, state.step)
    if errors:
        return state.model_copy(update={"errors": errors})
    return state.model_copy(update={"step": WizardStep(state.step + 1), "errors": {}})


def previous_step(state: WizardState, on_cancel: Callable[[], None]) -> WizardState:
    """Go back one step keeping all values; from the first step, leave the wizard."""
    if state.is_terminal or state.submitting:
        return state
    if state.step == WizardStep.PERSONAL_INFO:
        on_cancel()
        return state.model_copy(update={"cancelled": True})
    return state.model_copy(update={"step": WizardStep(state.step - 1), "errors": {}})


def begin_submit(state: WizardState) -> WizardState:
    """
    Re-validate the whole form and mark the state as submitting. Returns
    `state` itself when submitting is not allowed, or a copy carrying the
    field errors when validation fails.
    """
    if state.step != WizardStep.REVIEW or state.submitting:
        return state
    errors = validate_fields(state.values)
    if errors:
        return state.model_copy(update={"errors": errors})
    return state.model_copy(update={"submitting": True, "errors": {}, "last_error": None})


async def _send(in_flight: WizardState, client: ApplicationApi) -> WizardState:
    form = ApplicationForm.model_validate(in_flight.values)
    try:
        file_url = None
        if in_flight.file is not None:
            f = in_flight.file
            uploaded = await client.upload_file(f.filename, f.content, f.content_type)
            file_url = uploaded.url
        payload = form.model_dump(by_alias=True, mode="json", exclude={"terms_accepted"})
        payload["identityFileUrl"] = file_url
        record = await client.submit_application(payload)
    except LoanApiError as e:
        logger.warning("Application submission failed: %s", e.message)
        return in_flight.model_copy(
            update={
                "submitting": False,
                "last_error": e.message,
                "errors": {e.field: e.message} if e.field else {},
            }
        )
    return in_flight.model_copy(
        update={"step": WizardStep.SUCCESS, "submitting": False, "application_id": record.id}
    )


async def submit(state: WizardState, client: ApplicationApi) -> WizardState:
    """
    Upload the attached document (if any), then submit the application.
    Lands on SUCCESS with the new record id, or stays on REVIEW with the error.
    """
    in_flight = begin_submit(state)
    if not in_flight.submitting or in_flight is state:
        return in_flight
    return await _send(in_flight, client)


class WizardSession:
    """
    Holds the current state for one applicant. The in-flight state is stored
    before the first network call, so a second submit (or Back) issued while
    a submission is pending sees `submitting` and is ignored.
    """

    def __init__(self, state: WizardState):
        self.state = state

    def update_fields(self, **changes: Any) -> WizardState:
        self.state = update_fields(self.state, **changes)
        return self.state

    def select_payment_method(self, method: PaymentMethodType | str) -> WizardState:
        self.state = select_payment_method(self.state, method)
        return self.state

    def attach_file(self, filename: str, content: bytes, content_type: str = "application/octet-stream") -> WizardState:
        self.state = attach_file(self.state, filename, content, content_type)
        return self.state

    def next_step(self) -> WizardState:
        self.state = next_step(self.state)
        return self.state

    def previous_step(self, on_cancel: Callable[[], None]) -> WizardState:
        self.state = previous_step(self.state, on_cancel)
        return self.state

    async def submit(self, client: ApplicationApi) -> WizardState:
        in_flight = begin_submit(self.state)
        started = in_flight is not self.state and in_flight.submitting
        self.state = in_flight
        if not started:
            return in_flight
        self.state = await _send(in_flight, client)
        return self.state
