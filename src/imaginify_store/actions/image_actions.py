"""Data-access actions for transformed image records."""

import math
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Union

from bson import ObjectId
from pymongo import ReturnDocument

from .result import coerce_params, data_action, serialize, to_object_id
from ..caching.revalidation import RevalidationService, revalidation_service
from ..core.constants import DEFAULT_PAGE_SIZE, IMAGES_COLLECTION, ROOT_PATH, USERS_COLLECTION
from ..database.connection import ConnectionManager
from ..database.schema import AddImageParams, ImageRecord, UpdateImageParams
from ..exceptions import ActionError, NotFoundError
from ..logging import get_logger

logger = get_logger(__name__)

AUTHOR_FIELDS = {"_id": 1, "firstName": 1, "lastName": 1, "clerkId": 1}


async def _populate_authors(db, images: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Replace each image's author reference with the author's summary."""
    author_ids = list({image["author"] for image in images if isinstance(image.get("author"), ObjectId)})
    if not author_ids:
        return images

    cursor = db[USERS_COLLECTION].find({"_id": {"$in": author_ids}}, AUTHOR_FIELDS)
    authors = {author["_id"]: author for author in await cursor.to_list(length=None)}

    for image in images:
        author = authors.get(image.get("author"))
        if author is not None:
            image["author"] = author
    return images


# ADD IMAGE
@data_action
async def add_image(
    manager: ConnectionManager,
    image: Union[AddImageParams, Dict[str, Any]],
    user_id: str,
    path: str,
    revalidator: Optional[RevalidationService] = None
) -> Optional[Dict[str, Any]]:
    """Save a new image authored by ``user_id`` (internal user id)."""
    params = coerce_params(AddImageParams, image)
    author_id = to_object_id(user_id, "user_id")
    db = await manager.acquire()

    author = await db[USERS_COLLECTION].find_one({"_id": author_id}, AUTHOR_FIELDS)
    if not author:
        raise NotFoundError("User not found", {"user_id": user_id})

    now = datetime.now(timezone.utc)
    document = params.to_document()
    document.update({"author": author_id, "createdAt": now, "updatedAt": now})
    result = await db[IMAGES_COLLECTION].insert_one(document)
    document["_id"] = result.inserted_id

    (revalidator or revalidation_service).revalidate_path(path)
    logger.info("Image added", image_id=str(result.inserted_id), user_id=user_id)
    return serialize(ImageRecord, document)


# UPDATE IMAGE
@data_action
async def update_image(
    manager: ConnectionManager,
    image_id: str,
    image: Union[UpdateImageParams, Dict[str, Any]],
    user_id: str,
    path: str,
    revalidator: Optional[RevalidationService] = None
) -> Optional[Dict[str, Any]]:
    """Update an image; only its author may do so."""
    params = coerce_params(UpdateImageParams, image)
    object_id = to_object_id(image_id, "image_id")
    db = await manager.acquire()
    images = db[IMAGES_COLLECTION]

    image_to_update = await images.find_one({"_id": object_id})
    if not image_to_update or str(image_to_update.get("author")) != user_id:
        raise ActionError("Unauthorized or image not found", {"image_id": image_id, "user_id": user_id})

    changes = params.to_update()
    changes["updatedAt"] = datetime.now(timezone.utc)
    updated_image = await images.find_one_and_update(
        {"_id": object_id},
        {"$set": changes},
        return_document=ReturnDocument.AFTER,
    )
    if not updated_image:
        raise NotFoundError("Image not found", {"image_id": image_id})

    (revalidator or revalidation_service).revalidate_path(path)
    return serialize(ImageRecord, updated_image)


# DELETE IMAGE
@data_action
async def delete_image(
    manager: ConnectionManager,
    image_id: str,
    revalidator: Optional[RevalidationService] = None
) -> Optional[Dict[str, Any]]:
    """Delete an image and regenerate the home page."""
    object_id = to_object_id(image_id, "image_id")
    db = await manager.acquire()

    deleted_image = await db[IMAGES_COLLECTION].find_one_and_delete({"_id": object_id})
    if not deleted_image:
        raise NotFoundError("Image not found", {"image_id": image_id})

    (revalidator or revalidation_service).revalidate_path(ROOT_PATH)
    return serialize(ImageRecord, deleted_image)


# GET IMAGE
@data_action
async def get_image_by_id(manager: ConnectionManager, image_id: str) -> Optional[Dict[str, Any]]:
    """Find an image by internal id, with its author populated."""
    object_id = to_object_id(image_id, "image_id")
    db = await manager.acquire()

    image = await db[IMAGES_COLLECTION].find_one({"_id": object_id})
    if not image:
        raise NotFoundError("Image not found", {"image_id": image_id})

    (image,) = await _populate_authors(db, [image])
    return serialize(ImageRecord, image)


async def _paginate(db, query: Dict[str, Any], limit: int, page: int) -> Dict[str, Any]:
    if limit <= 0 or page <= 0:
        raise ActionError("limit and page must be positive", {"limit": limit, "page": page})

    images = db[IMAGES_COLLECTION]
    cursor = images.find(query).sort("updatedAt", -1).skip((page - 1) * limit).limit(limit)
    found = await _populate_authors(db, await cursor.to_list(length=limit))
    total = await images.count_documents(query)

    return {
        "data": [serialize(ImageRecord, image) for image in found],
        "totalPages": math.ceil(total / limit),
        "savedImages": total,
    }


# GET IMAGES
@data_action
async def get_all_images(manager: ConnectionManager, limit: int = DEFAULT_PAGE_SIZE, page: int = 1) -> Dict[str, Any]:
    """One page of all images, most recently updated first."""
    db = await manager.acquire()
    return await _paginate(db, {}, limit, page)


@data_action
async def get_user_images(
    manager: ConnectionManager,
    user_id: str,
    limit: int = DEFAULT_PAGE_SIZE,
    page: int = 1
) -> Dict[str, Any]:
    """One page of a single author's images, most recently updated first."""
    author_id = to_object_id(user_id, "user_id")
    db = await manager.acquire()
    return await _paginate(db, {"author": author_id}, limit, page)
