from typing import Protocol

from ...domain.intents import IntentClassification
from ...domain.models import RAGAnswer
from ...domain.workflow import ExecutionContext


class IntentClassifierPort(Protocol):
    def classify(
        self,
        message: str,
        context: ExecutionContext,
        rag_answer: RAGAnswer | None = None,
    ) -> IntentClassification:
        """Intent tag, extracted fields and a default reply for ``message``.

        ``rag_answer`` is auxiliary context; classifiers may quote it in the reply.
        """
        ...
