"""Read the total and a short description off a stored receipt image."""
from __future__ import annotations

import base64
import logging

from pydantic import ValidationError

from finscope.services import llm_client
from finscope.services.llm_client import LLMResponseError
from finscope.services.storage import ObjectStorage

from .schemas import ReceiptExtraction

logger = logging.getLogger(__name__)

EXTRACTION_SYSTEM_PROMPT = (
    "You are a receipt data extraction assistant. Extract the total amount and a brief "
    'description from receipts. Return ONLY a JSON object with "amount" (number) and '
    '"description" (string, max 100 chars). If you cannot find the amount, return amount as 0.'
)
EXTRACTION_INSTRUCTION = (
    "Extract the total amount and describe what this receipt is for. "
    'Return only JSON format: {"amount": number, "description": "brief description"}'
)
DESCRIPTION_MAX_LENGTH = 100

EXTRACTION_TOOL = llm_client.build_tool(
    "extract_receipt_data",
    "Extract receipt amount and description",
    {
        "type": "object",
        "properties": {
            "amount": {"type": "number", "description": "Total amount on the receipt"},
            "description": {
                "type": "string",
                "description": "Brief description of what the receipt is for",
            },
        },
        "required": ["amount", "description"],
        "additionalProperties": False,
    },
)


async def extract_receipt(
    storage: ObjectStorage, path: str, content_type: str | None = None
) -> ReceiptExtraction:
    """Download ``path`` and ask the vision model for its total.

    An amount of 0 is a valid answer. Raises ``StorageError`` or ``LLMError``.
    """
    image = await storage.download(path)
    encoded = base64.b64encode(image).decode("ascii")
    data_url = f"data:{content_type or 'image/jpeg'};base64,{encoded}"

    arguments = await llm_client.extract_with_image(
        EXTRACTION_SYSTEM_PROMPT,
        EXTRACTION_INSTRUCTION,
        data_url,
        tool=EXTRACTION_TOOL,
        stub_payload={"amount": 0, "description": "[stub] Receipt"},
    )
    logger.debug("Extracted data for %s: %s", path, arguments)

    if arguments.get("amount") is None:
        arguments["amount"] = 0
    if not arguments.get("description"):
        arguments["description"] = "Receipt"
    try:
        extraction = ReceiptExtraction.model_validate(arguments)
    except ValidationError as exc:
        raise LLMResponseError("Receipt extraction returned an unexpected shape") from exc

    extraction.description = extraction.description[:DESCRIPTION_MAX_LENGTH]
    return extraction
