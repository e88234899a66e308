"""Business logic services for the Threadline application."""

from .mailer import LogMailer, Mailer, SmtpMailer
from .rate_limit import RateLimiter
from .reactions import ReactionTarget, ReactionToggleEngine, ToggleAction, ToggleOutcome
from .threads import ThreadGraph, ThreadNode

__all__ = [
    "LogMailer",
    "Mailer",
    "SmtpMailer",
    "RateLimiter",
    "ReactionTarget",
    "ReactionToggleEngine",
    "ToggleAction",
    "ToggleOutcome",
    "ThreadGraph",
    "ThreadNode",
]
