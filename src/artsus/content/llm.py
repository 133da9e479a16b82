"""Chat-model answer generator for OpenAI-compatible services."""

from __future__ import annotations

import logging

from langchain_core.prompts import ChatPromptTemplate
from langchain_openai import ChatOpenAI

from artsus.config import Settings
from artsus.domain.models import Service
from artsus.errors import NotFound
from artsus.persistence.db import GameStore

logger = logging.getLogger(__name__)

PROMPT = ChatPromptTemplate.from_messages(
    [
        (
            "system",
            "You are a witness who saw the criminal. You only know this description "
            "of them:\n\n{description}\n\n"
            "Answer the investigator's question about the criminal with a single word, "
            "YES or NO. If the description does not say, answer with your best guess.",
        ),
        ("human", "{question}"),
    ]
)


class ChatAnswerGenerator:
    def __init__(
        self,
        settings: Settings,
        store: GameStore | None = None,
        temperature: float = 0.0,
    ) -> None:
        self.settings = settings
        self.store = store
        self.temperature = temperature
        self._clients: dict[str, ChatOpenAI] = {}

    def _service(self, model: str) -> Service | None:
        if self.store is None:
            return None
        try:
            return self.store.service_for_model(model)
        except NotFound:
            logger.info("No service registered for model %s; using environment settings", model)
            return None

    def _client(self, model: str) -> ChatOpenAI:
        if model not in self._clients:
            api_key = self.settings.openai_api_key
            base_url = self.settings.openai_base_url
            service = self._service(model)
            if service is not None:
                api_key = service.token or api_key
                base_url = service.url or base_url
            self._clients[model] = ChatOpenAI(
                model=model,
                temperature=self.temperature,
                api_key=api_key,
                base_url=base_url,
            )
        return self._clients[model]

    def generate(self, question: str, description: str, model: str) -> str:
        chain = PROMPT | self._client(model)
        response = chain.invoke({"question": question, "description": description})
        logger.debug("Model %s answered %r to %r", model, response.content, question)
        return str(response.content)
