"""
Attachment Summarizer — Turns attached files into debate context.

WHAT THIS DOES:
Founders can attach a pitch deck PDF, notes, or screenshots. Every persona
call includes a short summary of those files as "supporting context".

HOW EACH TYPE IS HANDLED:
- pdf / text  → content arrives already extracted; trimmed to an excerpt
- image       → data URL is captioned by the vision model; a caption the
                client already produced is used as-is

NEVER FAILS:
Summaries are best-effort. Any problem (no API key, provider error,
empty file) produces a placeholder like "[Image attached: deck.png]" so a
bad file can never block a debate.

USAGE:
    summarizer = AttachmentSummarizer(client)
    context = await summarizer.build_context(attachments, idea="AI tutoring")
"""

import asyncio
import logging
from typing import Optional

from debate_room.services.debate.errors import AttachmentLimitExceeded, DebateError
from debate_room.services.debate.generation import GenerationClient
from debate_room.services.debate.models import Attachment

logger = logging.getLogger(__name__)

# Per-file cap so a 40-page deck doesn't swamp every prompt
TEXT_EXCERPT_CHARS = 4000

SUPPORTED_TYPES = {"image", "pdf", "text"}


def check_attachment_limits(
    attachments: list[Attachment],
    max_files: Optional[int],
    max_file_size_mb: int,
) -> None:
    """
    Enforce plan limits on attachments.

    Args:
        attachments: Files attached to the idea
        max_files: Allowed file count (None = unlimited)
        max_file_size_mb: Per-file size limit

    Raises:
        AttachmentLimitExceeded: too many files, a file too large, or an unknown type
    """
    if max_files is not None and len(attachments) > max_files:
        plural = "s" if max_files != 1 else ""
        raise AttachmentLimitExceeded(
            f"Free users can only attach {max_files} file{plural}. Upgrade for more."
        )

    limit_bytes = max_file_size_mb * 1024 * 1024
    for attachment in attachments:
        if attachment.type not in SUPPORTED_TYPES:
            raise AttachmentLimitExceeded(f"Unsupported file type: {attachment.type}")
        if len(attachment.content.encode("utf-8")) > limit_bytes:
            raise AttachmentLimitExceeded(
                f"File too large: {attachment.name} (max {max_file_size_mb}MB)"
            )


class AttachmentSummarizer:
    """Best-effort summaries of attached files."""

    def __init__(self, client: GenerationClient):
        self.client = client

    async def summarize(self, attachment: Attachment, idea: str = "") -> str:
        """Summarize one file. Never raises."""
        content = attachment.content.strip()

        if attachment.type == "image":
            return await self._summarize_image(attachment, content, idea)

        if not content:
            return f"[{attachment.type.upper()} attached: {attachment.name} (no readable text)]"
        if len(content) > TEXT_EXCERPT_CHARS:
            content = content[:TEXT_EXCERPT_CHARS] + "... [truncated]"
        return content

    async def _summarize_image(self, attachment: Attachment, content: str, idea: str) -> str:
        placeholder = f"[Image attached: {attachment.name}]"
        if not content:
            return placeholder

        # Client already captioned it
        if not content.startswith(("data:image", "http://", "https://")):
            return content

        try:
            description = await self.client.describe_image(content, context=idea)
        except DebateError as e:
            logger.warning(f"Image description failed for {attachment.name}: {e}")
            return placeholder

        return description or placeholder

    async def build_context(self, attachments: list[Attachment], idea: str = "") -> str:
        """
        Summarize every file (concurrently) and join them into one block.

        Returns:
            "" when nothing is attached
        """
        if not attachments:
            return ""

        summaries = await asyncio.gather(
            *(self.summarize(a, idea) for a in attachments)
        )

        sections = [
            f"=== ATTACHED FILE: {a.name} ({a.type}) ===\n{summary}"
            for a, summary in zip(attachments, summaries)
        ]
        logger.info(f"Built supporting context from {len(attachments)} file(s)")
        return "\n\n".join(sections)
