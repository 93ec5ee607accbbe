"""Controller / Orchestrator to route messages to agents.

Classification is rule-based (see nlu.rules); each intent has exactly one
agent. No agent error escapes handle(): it is turned into a reply here.
"""
from datetime import datetime
from typing import Callable, Dict, Optional

from .config import Config
from .embed import EmbeddingClient
from .generate import GenerationClient
from .ingest import KnowledgeIngestor
from .retrieval import Retriever
from .vector_store import VectorIndex, create_vector_index
from ..agents.base_agent import BaseAgent
from ..agents.general_info_agent import GeneralInfoAgent
from ..agents.loyalty_agent import LoyaltyAgent
from ..agents.menu_agent import MenuAgent
from ..agents.meta_agent import MetaAgent
from ..agents.order_agent import OrderAgent
from ..agents.reservation_agent import ReservationAgent
from ..data.commerce_store import CommerceStore
from ..data.menu_store import MenuStore, get_menu_store
from ..nlu.rules import Intent, classify
from ..schemas.io_models import AgentResult
from ..utils.logger import get_logger

logger = get_logger()

BRANCH_FAILURE_REPLY = "Sorry, something went wrong while handling that. Please try again, or text HELP."


class Controller:
    def __init__(self, agents: Dict[Intent, BaseAgent]):
        missing = [i.value for i in Intent if i not in agents]
        if missing:
            raise ValueError(f"No agent registered for intent(s): {', '.join(missing)}")
        self.agents = agents

    async def route(self, user_id: str, text: str) -> AgentResult:
        intent = classify(text)
        agent = self.agents[intent]
        logger.info("[ROUTER] %s -> intent '%s' (agent '%s')", user_id, intent.value, agent.name)
        try:
            result = await agent.handle(user_id, text)
        except Exception:
            logger.exception("Agent '%s' failed for user %s", agent.name, user_id)
            return AgentResult(agent=agent.name, intent=intent.value, reply=BRANCH_FAILURE_REPLY, rejected=True)
        if result.rejected:
            logger.info("[ROUTER] %s request rejected: %s", intent.value, result.reply)
        return result

    async def handle(self, user_id: str, text: str) -> str:
        result = await self.route(user_id, text)
        return result.reply


class Components:
    """Everything the HTTP app wires together; built once per process."""

    def __init__(
        self,
        controller: Controller,
        ingestor: Optional[KnowledgeIngestor] = None,
        commerce_store: Optional[CommerceStore] = None,
    ):
        self.controller = controller
        self.ingestor = ingestor
        self.commerce_store = commerce_store


def build_components(
    index: Optional[VectorIndex] = None,
    embed_client: Optional[EmbeddingClient] = None,
    generator: Optional[GenerationClient] = None,
    menu_store: Optional[MenuStore] = None,
    commerce_store: Optional[CommerceStore] = None,
    clock: Callable[[], datetime] = datetime.now,
) -> Components:
    embed_client = embed_client or EmbeddingClient()
    if index is None:
        try:
            index = create_vector_index()
        except Exception as e:
            # Retriever treats a missing index as "answer ungrounded"
            logger.error("Vector index could not be initialized: %s", e)
    generator = generator or GenerationClient()
    menu_store = menu_store or get_menu_store()
    commerce_store = commerce_store or CommerceStore(menu_store=menu_store, clock=clock)

    retriever = Retriever(embed_client, index, namespace=Config.PINECONE_NAMESPACE)
    ingestor = KnowledgeIngestor(embed_client, index, namespace=Config.PINECONE_NAMESPACE) if index else None

    controller = Controller({
        Intent.menu: MenuAgent(menu_store, clock=clock),
        Intent.reserve: ReservationAgent(commerce_store),
        Intent.order: OrderAgent(commerce_store),
        Intent.loyalty: LoyaltyAgent(commerce_store),
        Intent.help: MetaAgent(),
        Intent.fallback: GeneralInfoAgent(retriever, generator),
    })
    return Components(controller, ingestor=ingestor, commerce_store=commerce_store)
