"""Transcript publisher module for pub/sub event publishing."""

import logging
from typing import Callable
from pubsub import pub
from ..models.transcription import TranscriptEvent

logger = logging.getLogger(__name__)

REALTIME_TOPIC = "transcription.realtime"


class TranscriptPublisher:
    """Publishes realtime transcript events using pubsub.pub."""

    def __init__(self, topic: str = REALTIME_TOPIC):
        """Initialize transcript publisher.

        Args:
            topic: Pub/sub topic name for transcript events
        """
        self.topic = topic
        self.published = 0
        logger.info(f"TranscriptPublisher initialized with topic: {topic}")

    def publish_transcript(self, text: str, is_final: bool) -> None:
        """Publish one transcript message to the pub/sub topic.

        Args:
            text: Transcript text
            is_final: Whether the provider marked the text as final
        """
        pub.sendMessage(self.topic, event=TranscriptEvent(text=text, is_final=is_final))
        self.published += 1
        logger.debug(f"Published {'final' if is_final else 'partial'} transcript: {text[:50]}")

    def get_callback(self) -> Callable[[str, bool], None]:
        """Get the ``on_transcript`` callback for a realtime session.

        Returns:
            Callback function that publishes transcript events
        """
        return self.publish_transcript
