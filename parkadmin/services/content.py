"""
CRUD orchestration for highlights, press releases, subscribers and categories.

Route handlers stay thin: they validate the request with a schema, call
one service method and shape the response. The services own:

- id parsing and lookups (400 for malformed ids, 404 for missing records)
- seq allocation on create (never taken from the client)
- the image pipeline (uploads before/after the write, warnings on failure)
- commit, then post-commit hooks (CDN cleanup)

Every database failure is rolled back. Constraint violations are raised as
ValidationError, anything else as UpstreamError.
"""

from dataclasses import dataclass, field
from typing import Generic, List, Optional, Sequence, Tuple, Type, TypeVar

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from parkadmin.core.errors import NotFoundError, UpstreamError, ValidationError
from parkadmin.core.logging import get_logger
from parkadmin.db.base import BaseModel, is_valid_id
from parkadmin.models.content import Category, Highlight, HighlightStatus, PressRelease, Subscriber
from parkadmin.schemas.category import CategoryWrite
from parkadmin.schemas.highlight import HighlightCreate, HighlightUpdate
from parkadmin.schemas.press_release import PressReleaseCreate, PressReleaseUpdate
from parkadmin.schemas.subscriber import SubscriberCreate
from parkadmin.services.hooks import HookFailure, PostCommitHooks, failures_warning
from parkadmin.services.images import ImagePipeline, is_data_uri
from parkadmin.services.listing import (
    CATEGORY_VIEW,
    HIGHLIGHT_VIEW,
    PRESS_RELEASE_VIEW,
    SUBSCRIBER_VIEW,
    FilterCriteria,
    ResourceView,
    filter_records,
    sort_records,
)
from parkadmin.services.sequence import FormMode, SequenceAllocator

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


# ========================================
# Helpers
# ========================================

def parse_id_list(raw: str) -> List[str]:
    """
    Split a comma-joined id path parameter.

    "a,b,,a" → ["a", "b"]: empty segments dropped, duplicates removed
    (first occurrence wins).

    Raises:
        ValidationError: no ids at all, or any id is malformed
    """
    ids: List[str] = []
    for part in (raw or "").split(","):
        part = part.strip()
        if part and part not in ids:
            ids.append(part)

    if not ids:
        raise ValidationError("No ids given")

    malformed = [i for i in ids if not is_valid_id(i)]
    if malformed:
        raise ValidationError(f"Invalid id format: {', '.join(malformed)}")

    return ids


def join_warnings(*warnings: Optional[str]) -> Optional[str]:
    parts = [w for w in warnings if w]
    return " ".join(parts) if parts else None


@dataclass
class BatchDeleteResult:
    """Outcome of a (batch) delete."""

    deleted: List[str] = field(default_factory=list)
    missing: List[str] = field(default_factory=list)
    hook_failures: List[HookFailure] = field(default_factory=list)

    @property
    def warning(self) -> Optional[str]:
        return failures_warning(self.hook_failures)


# ========================================
# Repository
# ========================================

class ContentRepository(Generic[ModelT]):
    """Data access for one model."""

    def __init__(self, db: AsyncSession, model: Type[ModelT], label: str):
        self.db = db
        self.model = model
        self.label = label

    async def list_all(self) -> List[ModelT]:
        result = await self.db.execute(select(self.model))
        return list(result.scalars().all())

    async def get(self, record_id: str) -> ModelT:
        if not is_valid_id(record_id):
            raise ValidationError(f"Invalid {self.label} ID format")

        result = await self.db.execute(select(self.model).where(self.model.id == record_id))
        record = result.scalar_one_or_none()
        if record is None:
            raise NotFoundError(f"{self.label.capitalize()} not found")
        return record

    async def get_many(self, ids: Sequence[str]) -> List[ModelT]:
        if not ids:
            return []
        result = await self.db.execute(select(self.model).where(self.model.id.in_(ids)))
        return list(result.scalars().all())

    def add(self, record: ModelT) -> None:
        self.db.add(record)

    async def delete_many(self, ids: Sequence[str]) -> None:
        await self.db.execute(
            delete(self.model)
            .where(self.model.id.in_(ids))
            .execution_options(synchronize_session=False)
        )


# ========================================
# Base service
# ========================================

class ContentService(Generic[ModelT]):
    """Shared list/get/delete behaviour."""

    model: Type[ModelT]
    label: str
    view: ResourceView

    def __init__(self, db: AsyncSession, pipeline: Optional[ImagePipeline] = None):
        self.db = db
        self.pipeline = pipeline
        self.repo: ContentRepository[ModelT] = ContentRepository(db, self.model, self.label)

    async def list(
        self,
        criteria: FilterCriteria,
        sort: Optional[str] = None,
        order: Optional[str] = None,
    ) -> List[ModelT]:
        """Full collection → filter → sort. Pagination is the caller's."""
        try:
            records = await self.repo.list_all()
        except SQLAlchemyError as e:
            logger.error("list_failed", resource=self.label, error=str(e))
            raise UpstreamError(f"Could not load {self.label} records") from e

        rows = filter_records(records, criteria, self.view)
        return sort_records(
            rows,
            self.view.sort_field(sort),
            order or self.view.default_order,
        )

    async def get(self, record_id: str) -> ModelT:
        return await self.repo.get(record_id)

    async def delete(self, raw_ids: str, hooks: Optional[PostCommitHooks] = None) -> BatchDeleteResult:
        """
        Delete every existing id in ``raw_ids``; report the rest as missing.

        Rows are removed and committed first. Hooks registered by
        ``_before_delete`` (image cleanup) run afterwards and can only
        produce a warning.

        Raises:
            ValidationError: malformed id list
            NotFoundError: none of the ids exist
        """
        hooks = hooks if hooks is not None else PostCommitHooks()
        ids = parse_id_list(raw_ids)

        records = await self.repo.get_many(ids)
        found = {record.id for record in records}
        if not found:
            raise NotFoundError(f"No {self.label} records found to delete")

        result = BatchDeleteResult(
            deleted=[i for i in ids if i in found],
            missing=[i for i in ids if i not in found],
        )

        await self._before_delete(records, hooks)
        await self.repo.delete_many(result.deleted)
        await self._commit(f"delete {self.label}")

        logger.info(
            "records_deleted",
            resource=self.label,
            deleted=len(result.deleted),
            missing=len(result.missing),
        )

        result.hook_failures = await hooks.run()
        return result

    async def _before_delete(self, records: List[ModelT], hooks: PostCommitHooks) -> None:
        """Hook for subclasses: register cleanup or detach related rows."""

    async def _commit(self, action: str, conflict: Optional[str] = None) -> None:
        """
        Commit, rolling back on failure.

        Raises:
            ValidationError: a constraint rejected the write (``conflict`` is the message)
            UpstreamError: any other database failure
        """
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.info("commit_conflict", action=action, error=str(e.orig))
            raise ValidationError(conflict or f"Could not {action}: it conflicts with existing data") from None
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("commit_failed", action=action, error=str(e))
            raise UpstreamError(f"Could not {action}") from e

    def _require_pipeline(self) -> ImagePipeline:
        if self.pipeline is None:
            raise RuntimeError(f"{self.__class__.__name__} needs an ImagePipeline")
        return self.pipeline


# ========================================
# Highlights
# ========================================

class HighlightService(ContentService[Highlight]):
    model = Highlight
    label = "highlight"
    view = HIGHLIGHT_VIEW

    async def create(self, data: HighlightCreate, author_email: Optional[str]) -> Tuple[Highlight, Optional[str]]:
        """
        Create a highlight.

        Category is checked first, then the images are processed; the record
        is stored with only the URLs that made it to the CDN.
        """
        pipeline = self._require_pipeline()
        category = await self._resolve_category(data.category)

        seq = await SequenceAllocator(self.db).resolve("highlights", FormMode.CREATE)
        images = await pipeline.process(data.images)

        highlight = Highlight(
            seq=seq,
            title=data.title,
            content=data.content,
            status=data.status,
            date=data.date,
            location=data.location,
            sdg=data.sdg,
            images=images.urls,
            category=category,
            author_email=author_email,
        )
        self.repo.add(highlight)

        try:
            await self._commit("create highlight")
        except Exception:
            await pipeline.delete(self._uploaded(data.images, images.urls))
            raise

        logger.info("highlight_created", id=highlight.id, seq=seq, images=len(images.urls))
        return highlight, images.warning

    async def update(
        self,
        record_id: str,
        data: HighlightUpdate,
        hooks: Optional[PostCommitHooks] = None,
    ) -> Tuple[Highlight, Optional[str]]:
        """
        Partial update. ``seq`` is preserved whatever the request carries.

        When ``images`` is supplied, new data URIs are uploaded, kept URLs
        retained, and URLs no longer referenced are deleted from the CDN
        after commit.
        """
        hooks = hooks if hooks is not None else PostCommitHooks()
        highlight = await self.repo.get(record_id)
        fields = data.model_dump(exclude_unset=True)

        highlight.seq = await SequenceAllocator(self.db).resolve(
            "highlights", FormMode.EDIT, existing_seq=highlight.seq
        )

        for name in ("title", "content", "status"):
            if name in fields:
                if fields[name] is None:
                    raise ValidationError(f"{name.capitalize()} cannot be empty")
                setattr(highlight, name, fields[name])

        for name in ("date", "location"):
            if name in fields:
                setattr(highlight, name, fields[name])

        if "sdg" in fields:
            highlight.sdg = fields["sdg"] or []

        if "category" in fields:
            highlight.category = await self._resolve_category(fields["category"])

        warning = None
        uploaded: List[str] = []
        if "images" in fields:
            pipeline = self._require_pipeline()
            requested = [image for image in (fields["images"] or []) if image]
            if len(requested) > pipeline.max_images:
                raise ValidationError(f"Only {pipeline.max_images} images are allowed per highlight")
            images = await pipeline.process(requested)
            warning = images.warning
            uploaded = self._uploaded(requested, images.urls)

            # Only images the client left out
            removed = [url for url in (highlight.images or []) if url not in requested]
            highlight.images = images.urls
            if removed:
                hooks.add("delete_replaced_images", lambda: pipeline.delete(removed))

        try:
            await self._commit("update highlight")
        except Exception:
            if uploaded:
                await self._require_pipeline().delete(uploaded)
            raise

        await self.db.refresh(highlight)
        failures = await hooks.run()

        logger.info("highlight_updated", id=highlight.id, seq=highlight.seq)
        return highlight, join_warnings(warning, failures_warning(failures))

    async def set_status(self, record_id: str, status: HighlightStatus) -> Highlight:
        highlight = await self.repo.get(record_id)
        highlight.status = status
        await self._commit("update highlight status")
        await self.db.refresh(highlight)
        logger.info("highlight_status_changed", id=highlight.id, status=str(status))
        return highlight

    async def _before_delete(self, records: List[Highlight], hooks: PostCommitHooks) -> None:
        urls = [url for record in records for url in (record.images or [])]
        if urls:
            pipeline = self._require_pipeline()
            hooks.add("delete_images", lambda: pipeline.delete(urls))

    async def _resolve_category(self, category_id: Optional[str]) -> Optional[Category]:
        if not category_id:
            return None
        if not is_valid_id(category_id):
            raise ValidationError("Invalid category ID format")
        category = await self.db.get(Category, category_id)
        if category is None:
            raise ValidationError("Category not found")
        return category

    @staticmethod
    def _uploaded(requested: Sequence[str], stored: Sequence[str]) -> List[str]:
        """URLs in ``stored`` that were produced by this request's uploads."""
        return [url for url in stored if url not in requested]


# ========================================
# Press releases
# ========================================

class PressReleaseService(ContentService[PressRelease]):
    model = PressRelease
    label = "press release"
    view = PRESS_RELEASE_VIEW

    async def create(self, data: PressReleaseCreate) -> Tuple[PressRelease, Optional[str]]:
        """
        Create a press release.

        The record is written first; the image is processed afterwards. A
        failed upload leaves ``image`` empty and yields a warning.
        """
        pipeline = self._require_pipeline()
        seq = await SequenceAllocator(self.db).resolve("press_releases", FormMode.CREATE)

        press_release = PressRelease(
            seq=seq,
            title=data.title,
            publisher=data.publisher,
            date=data.date,
            link=data.link,
            image=None,
        )
        self.repo.add(press_release)
        await self._commit("create press release")
        logger.info("press_release_created", id=press_release.id, seq=seq)

        images = await pipeline.upload_one(data.image)
        if images.urls:
            press_release.image = images.urls[0]
            await self._commit("store press release image")
            await self.db.refresh(press_release)
        else:
            logger.warning("press_release_image_missing", id=press_release.id, errors=images.errors)

        return press_release, images.warning

    async def update(
        self,
        record_id: str,
        data: PressReleaseUpdate,
        hooks: Optional[PostCommitHooks] = None,
    ) -> Tuple[PressRelease, Optional[str]]:
        """
        Partial update.

        Image rules:
        - data URI: uploaded; on success the old image is deleted after
          commit, on failure the old image is kept and a warning returned
        - URL: stored as is
        - null / "": image cleared and the old one deleted after commit
        """
        hooks = hooks if hooks is not None else PostCommitHooks()
        press_release = await self.repo.get(record_id)
        fields = data.model_dump(exclude_unset=True)

        press_release.seq = await SequenceAllocator(self.db).resolve(
            "press_releases", FormMode.EDIT, existing_seq=press_release.seq
        )

        for name in ("title", "publisher", "date", "link"):
            if name in fields:
                if fields[name] is None:
                    raise ValidationError(f"{name.capitalize()} cannot be empty")
                setattr(press_release, name, fields[name])

        warning = None
        old_image = press_release.image
        if "image" in fields and fields["image"] != old_image:
            new_image = fields["image"]
            pipeline = self._require_pipeline()

            if new_image is None:
                press_release.image = None
                if old_image:
                    hooks.add("delete_old_image", lambda: pipeline.delete([old_image]))
            elif is_data_uri(new_image):
                images = await pipeline.upload_one(new_image)
                if images.urls:
                    press_release.image = images.urls[0]
                    if old_image:
                        hooks.add("delete_old_image", lambda: pipeline.delete([old_image]))
                else:
                    warning = images.warning
            else:
                press_release.image = new_image

        await self._commit("update press release")
        await self.db.refresh(press_release)
        failures = await hooks.run()

        logger.info("press_release_updated", id=press_release.id, seq=press_release.seq)
        return press_release, join_warnings(warning, failures_warning(failures))

    async def _before_delete(self, records: List[PressRelease], hooks: PostCommitHooks) -> None:
        urls = [record.image for record in records if record.image]
        if urls:
            pipeline = self._require_pipeline()
            hooks.add("delete_images", lambda: pipeline.delete(urls))


# ========================================
# Subscribers
# ========================================

class SubscriberService(ContentService[Subscriber]):
    model = Subscriber
    label = "subscriber"
    view = SUBSCRIBER_VIEW

    async def create(self, data: SubscriberCreate) -> Subscriber:
        await self._ensure_unique_email(data.email)
        seq = await SequenceAllocator(self.db).resolve("subscribers", FormMode.CREATE)

        subscriber = Subscriber(seq=seq, email=data.email)
        self.repo.add(subscriber)
        await self._commit_unique("subscribe")

        logger.info("subscriber_created", id=subscriber.id, seq=seq)
        return subscriber

    async def update(self, record_id: str, data: SubscriberCreate) -> Subscriber:
        subscriber = await self.repo.get(record_id)
        if data.email != subscriber.email:
            await self._ensure_unique_email(data.email)
            subscriber.email = data.email
            await self._commit_unique("update subscriber")
            await self.db.refresh(subscriber)
        return subscriber

    async def _ensure_unique_email(self, email: str) -> None:
        result = await self.db.execute(select(Subscriber.id).where(Subscriber.email == email))
        if result.first() is not None:
            raise ValidationError("Email already subscribed")

    async def _commit_unique(self, action: str) -> None:
        await self._commit(action, conflict="Email already subscribed")


# ========================================
# Categories
# ========================================

class CategoryService(ContentService[Category]):
    model = Category
    label = "category"
    view = CATEGORY_VIEW

    async def create(self, data: CategoryWrite) -> Category:
        await self._ensure_unique_name(data.name)
        category = Category(name=data.name)
        self.repo.add(category)
        await self._commit_unique("create category")
        logger.info("category_created", id=category.id, name=category.name)
        return category

    async def update(self, record_id: str, data: CategoryWrite) -> Category:
        category = await self.repo.get(record_id)
        if data.name != category.name:
            await self._ensure_unique_name(data.name, exclude_id=category.id)
            category.name = data.name
            await self._commit_unique("rename category")
            await self.db.refresh(category)
        return category

    async def _before_delete(self, records: List[Category], hooks: PostCommitHooks) -> None:
        # Highlights keep existing without a category
        await self.db.execute(
            update(Highlight)
            .where(Highlight.category_id.in_([record.id for record in records]))
            .values(category_id=None)
            .execution_options(synchronize_session=False)
        )

    async def _ensure_unique_name(self, name: str, exclude_id: Optional[str] = None) -> None:
        stmt = select(Category.id).where(func.lower(Category.name) == name.lower())
        if exclude_id:
            stmt = stmt.where(Category.id != exclude_id)
        result = await self.db.execute(stmt)
        if result.first() is not None:
            raise ValidationError("Category already exists")

    async def _commit_unique(self, action: str) -> None:
        await self._commit(action, conflict="Category already exists")
