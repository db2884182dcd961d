import logging
from dataclasses import dataclass, field

from dotenv import load_dotenv

from .config import Settings, load_settings
from .errors import GardenQAError
from .logging_setup import setup_logging
from .services.garden_db import GardenDBLoader, LoadStatus, Record
from .utils import matcher

log = logging.getLogger("gardenqa")

EMPTY_QUESTION_MESSAGE = "Please enter a question first (e.g. 'hibiscus pruning')."
NO_MATCH_MESSAGE = (
    "No matching answer was found. Try different keywords, "
    "or a plant name plus what you want to do."
)


@dataclass(frozen=True)
class Answer:
    question: str
    hits: list[matcher.Match] = field(default_factory=list)
    message: str = ""

    @property
    def best(self) -> matcher.Match | None:
        return self.hits[0] if self.hits else None

    @property
    def candidates(self) -> list[matcher.Match]:
        return self.hits[1:]


def label(record: Record) -> str:
    return record.keys[0] if record.keys and record.keys[0] else record.id


class GardenQA:
    """Session state for the Q&A widget: one loader, one active category."""

    def __init__(self, settings: Settings, loader: GardenDBLoader | None = None):
        self.settings = settings
        self.loader = loader or GardenDBLoader(
            settings.garden_db_url, timeout=settings.garden_db_timeout
        )
        self._category = settings.default_category

    @property
    def status(self) -> LoadStatus:
        return self.loader.status

    @property
    def category(self) -> str:
        return self._category

    def select_category(self, category: str) -> None:
        self._category = category or matcher.ALL_CATEGORIES
        log.debug("Active category: %s", self._category)

    async def start(self) -> None:
        """Load the database up front. Failures end up in `status`, not raised."""
        log.info("Loading garden DB from %s", self.loader.source)
        try:
            await self.loader.load()
        except GardenQAError:
            log.warning("Garden DB unavailable: %s", self.status.message)
            return
        log.info(self.status.message)

    def categories(self) -> list[str]:
        db = self.loader.get()
        return matcher.categories(db) if db else []

    def suggestions(self, limit: int = 10) -> list[Record]:
        db = self.loader.get()
        if db is None:
            return []
        return matcher.suggestions(db, self._category, limit)

    async def ask(self, question: str) -> Answer:
        text = (question or "").strip()
        if not text:
            return Answer(question=text, message=EMPTY_QUESTION_MESSAGE)

        try:
            db = await self.loader.load()
        except GardenQAError:
            return Answer(question=text, message=self.status.message)

        hits = matcher.search(text, db, self._category)
        log.debug("Question %r in %s: %d hits", text, self._category, len(hits))
        if not hits:
            return Answer(question=text, message=NO_MATCH_MESSAGE)
        return Answer(question=text, hits=hits, message=f"Matched: {label(hits[0].record)}")


def create_app() -> GardenQA:
    load_dotenv()
    settings = load_settings()
    setup_logging(settings.log_level)
    return GardenQA(settings)
