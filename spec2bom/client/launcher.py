"""Launch asynchronous Spec-to-BOM generation jobs."""

from typing import Any

from spec2bom.client.store import ObjectStoreClient
from spec2bom.core.logging import get_logger
from spec2bom.jobs.queue import JobQueue

logger = get_logger(__name__)

DEFAULT_INTERACTION = "SpecToBOM@1"


def build_execution_payload(
    content_source: str,
    interaction: str = DEFAULT_INTERACTION,
    environment: str | None = None,
    model: str | None = None,
) -> dict[str, Any]:
    """Build the body posted to ``execute-async``.

    The short ``{file, interaction}`` form is used unless an environment or
    model is configured, in which case the conversation form carrying a
    ``config`` block is sent.
    """
    if not environment and not model:
        return {"file": content_source, "interaction": interaction}

    config: dict[str, str] = {}
    if environment:
        config["environment"] = environment
    if model:
        config["model"] = model
    return {
        "type": "conversation",
        "interaction": interaction,
        "data": {"file": content_source},
        "config": config,
    }


class JobLauncher:
    """Start generation jobs and record them in the local queue."""

    def __init__(
        self,
        store: ObjectStoreClient,
        queue: JobQueue,
        interaction: str = DEFAULT_INTERACTION,
        environment: str | None = None,
        model: str | None = None,
    ) -> None:
        self.store = store
        self.queue = queue
        self.interaction = interaction
        self.environment = environment
        self.model = model

    async def launch(self, content_source: str, display_name: str) -> str:
        """Start a job for an uploaded content reference.

        Args:
            content_source: ``content.source`` of an object returned by the uploader
            display_name: Name shown while the job is queued

        Returns:
            The platform job id, or a local placeholder when none was returned
        """
        payload = build_execution_payload(
            content_source, self.interaction, self.environment, self.model
        )
        response = await self.store.execute_async(payload)

        job_id = response.get("id") or response.get("runId")
        if not job_id:
            job_id = self.queue.placeholder_id()
            logger.warning(
                "job_id_missing", placeholder=job_id, display_name=display_name
            )

        self.queue.enqueue(str(job_id), display_name)
        logger.info(
            "job_launched",
            job_id=job_id,
            display_name=display_name,
            interaction=self.interaction,
        )
        return str(job_id)
