"""
Producers: turn a target into a schema-conforming record via the generation service.

Each producer builds one natural-language instruction, sends it with the
matching response contract and re-raises any failure as a ``GenerationError``
carrying a short, user-facing message. Subjects are interpolated as given.
"""

import json
import logging
from typing import Awaitable, Callable, Dict

from .exceptions import GenerationError
from .gemini_client import ContentGenerator
from .response_schemas import (
    EMAIL_CONTRACT,
    NETWORK_CONTRACT,
    RELIABILITY_CONTRACT,
    WHOIS_CONTRACT,
    ResponseContract,
)
from .schemas import (
    EmailRecord,
    EmailResult,
    NetworkRecord,
    NetworkResult,
    ReliabilityReview,
    ReviewableResult,
    TargetKind,
    WhoisRecord,
    WhoisResult,
)

logger = logging.getLogger(__name__)


def whois_instruction(domain: str) -> str:
    return f"Perform a WHOIS lookup for the domain: {domain}"


def network_instruction(target: str) -> str:
    return (
        f"Perform a detailed network analysis for the target (IP or domain): {target}. "
        "Provide open ports, SSL info, detected technologies, DNS records, "
        "hosting provider, and server location."
    )


def email_instruction(email: str) -> str:
    return (
        f'Analyze the email address "{email}". Check for syntax validity, domain MX '
        "records, presence in known data breaches, and associated public social media "
        "profiles. Provide sources and dates for breaches, and URLs for social profiles."
    )


def reliability_instruction(serialized: str) -> str:
    return (
        "Analyze the following OSINT data for reliability and inconsistencies. "
        "Provide a reliability score (Élevée, Moyenne, or Faible), a summary, and "
        "specific findings with a status (positive, negative, warning). "
        f"Data: {serialized}"
    )


async def _produce(
    generator: ContentGenerator,
    instruction: str,
    contract: ResponseContract,
    failure_message: str,
):
    try:
        # A value that does not match the contract counts as a failed call.
        return contract.validate_payload(await generator.generate(instruction, contract))
    except Exception as e:
        logger.error("Error fetching %s data from Gemini: %s", contract.name, e)
        raise GenerationError(failure_message) from e


async def fetch_whois_record(generator: ContentGenerator, domain: str) -> WhoisRecord:
    return await _produce(
        generator, whois_instruction(domain), WHOIS_CONTRACT, "Failed to fetch WHOIS data."
    )


async def fetch_network_record(
    generator: ContentGenerator, target: str
) -> NetworkRecord:
    return await _produce(
        generator,
        network_instruction(target),
        NETWORK_CONTRACT,
        "Failed to fetch Network data.",
    )


async def fetch_email_record(generator: ContentGenerator, email: str) -> EmailRecord:
    return await _produce(
        generator, email_instruction(email), EMAIL_CONTRACT, "Failed to fetch Email data."
    )


def serialize_for_review(result: ReviewableResult) -> str:
    """Serializes the record of a settled result the way it is shown to the reviewer."""
    return json.dumps(
        result.data.model_dump(mode="json", by_alias=True),
        indent=2,
        ensure_ascii=False,
    )


async def fetch_reliability_review(
    generator: ContentGenerator, result: ReviewableResult
) -> ReliabilityReview:
    """
    Runs the secondary reliability analysis on a settled primary result.

    Args:
        generator (ContentGenerator): The content generation client.
        result (ReviewableResult): A WHOIS, network or email result.

    Returns:
        ReliabilityReview: The reviewer's verdict.
    """
    return await _produce(
        generator,
        reliability_instruction(serialize_for_review(result)),
        RELIABILITY_CONTRACT,
        "Failed to fetch reliability analysis.",
    )


# --- Dispatch Table ---


async def _whois(generator: ContentGenerator, subject: str) -> WhoisResult:
    return WhoisResult(data=await fetch_whois_record(generator, subject))


async def _network(generator: ContentGenerator, subject: str) -> NetworkResult:
    return NetworkResult(data=await fetch_network_record(generator, subject))


async def _email(generator: ContentGenerator, subject: str) -> EmailResult:
    return EmailResult(data=await fetch_email_record(generator, subject))


Producer = Callable[[ContentGenerator, str], Awaitable[ReviewableResult]]

PRODUCERS: Dict[TargetKind, Producer] = {
    TargetKind.DOMAIN: _whois,
    TargetKind.IP: _network,
    TargetKind.EMAIL: _email,
}
