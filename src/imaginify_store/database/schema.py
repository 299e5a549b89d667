"""Record shapes and collection declarations for the MongoDB store."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Annotated, Any, Dict, List, Optional, Tuple, Union

from bson import ObjectId
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field

from ..core.constants import (
    DEFAULT_CREDIT_BALANCE,
    DEFAULT_PLAN_ID,
    IMAGES_COLLECTION,
    TRANSACTIONS_COLLECTION,
    USERS_COLLECTION,
)


def _object_id_to_str(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    return value


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


PyObjectId = Annotated[str, BeforeValidator(_object_id_to_str)]


class StoredModel(BaseModel):
    """Base for models persisted with camelCase document keys."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    def to_document(self) -> Dict[str, Any]:
        """Render the model as a document ready for insertion."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def to_update(self) -> Dict[str, Any]:
        """Render only the fields the caller explicitly set."""
        return self.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

class UserRecord(StoredModel):
    """A user document as stored in the ``users`` collection."""
    id: Optional[PyObjectId] = Field(default=None, alias="_id")
    clerk_id: str = Field(alias="clerkId", description="External identifier from the auth provider")
    email: str = Field(alias="email")
    username: Optional[str] = Field(default=None, alias="username")
    photo: Optional[str] = Field(default=None, alias="photo")
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    plan_id: int = Field(default=DEFAULT_PLAN_ID, alias="planId")
    credit_balance: int = Field(default=DEFAULT_CREDIT_BALANCE, alias="creditBalance")


class CreateUserParams(StoredModel):
    """Fields accepted when creating a user."""
    clerk_id: str = Field(alias="clerkId", min_length=1)
    email: str = Field(alias="email", min_length=3)
    username: Optional[str] = Field(default=None, alias="username")
    photo: Optional[str] = Field(default=None, alias="photo")
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    plan_id: int = Field(default=DEFAULT_PLAN_ID, alias="planId")
    credit_balance: int = Field(default=DEFAULT_CREDIT_BALANCE, alias="creditBalance")


class UpdateUserParams(StoredModel):
    """Profile fields that may be replaced on an existing user."""
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    username: Optional[str] = Field(default=None, alias="username")
    photo: Optional[str] = Field(default=None, alias="photo")


# ---------------------------------------------------------------------------
# Images
# ---------------------------------------------------------------------------

class ImageAuthor(StoredModel):
    """Author summary embedded when an image is read back."""
    id: PyObjectId = Field(alias="_id")
    first_name: Optional[str] = Field(default=None, alias="firstName")
    last_name: Optional[str] = Field(default=None, alias="lastName")
    clerk_id: Optional[str] = Field(default=None, alias="clerkId")


class ImageRecord(StoredModel):
    """An image-transformation document as stored in the ``images`` collection."""
    id: Optional[PyObjectId] = Field(default=None, alias="_id")
    title: str = Field(alias="title")
    transformation_type: str = Field(alias="transformationType")
    public_id: str = Field(alias="publicId")
    secure_url: str = Field(alias="secureURL")
    width: Optional[int] = Field(default=None, alias="width")
    height: Optional[int] = Field(default=None, alias="height")
    transformation_config: Optional[Dict[str, Any]] = Field(default=None, alias="config")
    transformation_url: Optional[str] = Field(default=None, alias="transformationUrl")
    aspect_ratio: Optional[str] = Field(default=None, alias="aspectRatio")
    color: Optional[str] = Field(default=None, alias="color")
    prompt: Optional[str] = Field(default=None, alias="prompt")
    author: Optional[Union[ImageAuthor, PyObjectId]] = Field(default=None, alias="author")
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=_utcnow, alias="updatedAt")


class AddImageParams(StoredModel):
    """Fields accepted when saving a new transformed image."""
    title: str = Field(alias="title", min_length=1)
    transformation_type: str = Field(alias="transformationType")
    public_id: str = Field(alias="publicId")
    secure_url: str = Field(alias="secureURL")
    width: Optional[int] = Field(default=None, alias="width")
    height: Optional[int] = Field(default=None, alias="height")
    transformation_config: Optional[Dict[str, Any]] = Field(default=None, alias="config")
    transformation_url: Optional[str] = Field(default=None, alias="transformationUrl")
    aspect_ratio: Optional[str] = Field(default=None, alias="aspectRatio")
    color: Optional[str] = Field(default=None, alias="color")
    prompt: Optional[str] = Field(default=None, alias="prompt")


class UpdateImageParams(StoredModel):
    """Image fields that may be changed after creation."""
    title: Optional[str] = Field(default=None, alias="title")
    transformation_type: Optional[str] = Field(default=None, alias="transformationType")
    public_id: Optional[str] = Field(default=None, alias="publicId")
    secure_url: Optional[str] = Field(default=None, alias="secureURL")
    width: Optional[int] = Field(default=None, alias="width")
    height: Optional[int] = Field(default=None, alias="height")
    transformation_config: Optional[Dict[str, Any]] = Field(default=None, alias="config")
    transformation_url: Optional[str] = Field(default=None, alias="transformationUrl")
    aspect_ratio: Optional[str] = Field(default=None, alias="aspectRatio")
    color: Optional[str] = Field(default=None, alias="color")
    prompt: Optional[str] = Field(default=None, alias="prompt")


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------

class TransactionRecord(StoredModel):
    """A payment document as stored in the ``transactions`` collection."""
    id: Optional[PyObjectId] = Field(default=None, alias="_id")
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")
    stripe_id: str = Field(alias="stripeId")
    amount: float = Field(alias="amount")
    plan: Optional[str] = Field(default=None, alias="plan")
    credits: Optional[int] = Field(default=None, alias="credits")
    buyer: Optional[PyObjectId] = Field(default=None, alias="buyer")


class CreateTransactionParams(StoredModel):
    """Fields reported by the payment provider for a completed checkout."""
    stripe_id: str = Field(alias="stripeId", min_length=1)
    amount: float = Field(alias="amount", ge=0)
    plan: Optional[str] = Field(default=None, alias="plan")
    credits: Optional[int] = Field(default=None, alias="credits")
    buyer_id: str = Field(alias="buyerId")


# ---------------------------------------------------------------------------
# Collection declarations
# ---------------------------------------------------------------------------

@dataclass
class CollectionIndex:
    """Represents an index declared on a collection."""
    collection: str
    name: str
    keys: List[Tuple[str, int]]
    description: str
    unique: bool = False
    partial_filter: Optional[Dict[str, Any]] = field(default=None)

    def create_kwargs(self) -> Dict[str, Any]:
        """Keyword arguments for ``create_index``."""
        kwargs: Dict[str, Any] = {"name": self.name, "unique": self.unique}
        if self.partial_filter is not None:
            kwargs["partialFilterExpression"] = self.partial_filter
        return kwargs


INDEXES = [
    CollectionIndex(
        collection=USERS_COLLECTION,
        name="unique_clerk_id",
        keys=[("clerkId", 1)],
        unique=True,
        description="Ensure external identifiers are unique"
    ),
    CollectionIndex(
        collection=USERS_COLLECTION,
        name="unique_email",
        keys=[("email", 1)],
        unique=True,
        description="Ensure email addresses are unique"
    ),
    CollectionIndex(
        collection=USERS_COLLECTION,
        name="unique_username",
        keys=[("username", 1)],
        unique=True,
        partial_filter={"username": {"$type": "string"}},
        description="Ensure usernames are unique when set"
    ),
    CollectionIndex(
        collection=IMAGES_COLLECTION,
        name="image_author_updated_index",
        keys=[("author", 1), ("updatedAt", -1)],
        description="Index for listing an author's images most recently updated first"
    ),
    CollectionIndex(
        collection=TRANSACTIONS_COLLECTION,
        name="unique_stripe_id",
        keys=[("stripeId", 1)],
        unique=True,
        description="Ensure each payment is recorded once"
    ),
    CollectionIndex(
        collection=TRANSACTIONS_COLLECTION,
        name="transaction_buyer_index",
        keys=[("buyer", 1)],
        description="Index on buyer for purchase history"
    ),
]
