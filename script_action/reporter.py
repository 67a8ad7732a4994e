from __future__ import annotations

from .github.workflow import GithubActionsHost

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"


def report_success(host: GithubActionsHost) -> None:
    host.set_output("status", "success")


def report_failure(host: GithubActionsHost, error: BaseException) -> None:
    message = str(error).strip()
    host.set_failed(message or UNEXPECTED_ERROR_MESSAGE)
