"""Request shapes for the face search operations.

Requests are built by callers and serialised to the service's JSON body by
the transport layer; :meth:`SearchFacesByImageRequest.to_dict` produces that
body. Constraints are checked by ``validate()`` rather than on every
assignment so a request can be filled in step by step.
"""

import base64
import re
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

COLLECTION_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_.\-]+$")
COLLECTION_ID_MAX_LENGTH = 255
MAX_FACES_RANGE = (1, 4096)
FACE_MATCH_THRESHOLD_RANGE = (0.0, 100.0)


@dataclass
class S3Object:
    """Location of an image stored in S3."""

    bucket: Optional[str] = None
    name: Optional[str] = None
    version: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        if self.bucket is not None:
            body["Bucket"] = self.bucket
        if self.name is not None:
            body["Name"] = self.name
        if self.version is not None:
            body["Version"] = self.version
        return body


@dataclass
class Image:
    """Input image, either inline bytes or an S3 object."""

    bytes_: Optional[bytes] = None
    s3_object: Optional[S3Object] = None

    def validate(self) -> None:
        if (self.bytes_ is None) == (self.s3_object is None):
            raise ValueError("Image needs exactly one of bytes_ or s3_object")

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {}
        if self.bytes_ is not None:
            body["Bytes"] = base64.b64encode(self.bytes_).decode("ascii")
        if self.s3_object is not None:
            body["S3Object"] = self.s3_object.to_dict()
        return body


@dataclass
class SearchFacesByImageRequest:
    """Search a face collection for faces matching the largest face in an image.

    Attributes:
        collection_id: ID of the collection to search
        image: Source image, as bytes or an S3 object
        max_faces: Maximum number of matches to return, highest confidence first
        face_match_threshold: Minimum match confidence, in percent
    """

    collection_id: Optional[str] = None
    image: Optional[Image] = None
    max_faces: Optional[int] = None
    face_match_threshold: Optional[float] = None

    def with_collection_id(self, collection_id: str) -> "SearchFacesByImageRequest":
        return replace(self, collection_id=collection_id)

    def with_image(self, image: Image) -> "SearchFacesByImageRequest":
        return replace(self, image=image)

    def with_max_faces(self, max_faces: int) -> "SearchFacesByImageRequest":
        return replace(self, max_faces=max_faces)

    def with_face_match_threshold(self, threshold: float) -> "SearchFacesByImageRequest":
        return replace(self, face_match_threshold=threshold)

    def validate(self) -> None:
        """Check the documented service constraints.

        Raises:
            ValueError: If a field is missing or out of range
        """
        if self.collection_id is None:
            raise ValueError("collection_id is required")
        if not (1 <= len(self.collection_id) <= COLLECTION_ID_MAX_LENGTH):
            raise ValueError(
                f"collection_id length must be between 1 and {COLLECTION_ID_MAX_LENGTH}"
            )
        if not COLLECTION_ID_PATTERN.match(self.collection_id):
            raise ValueError("collection_id must match [a-zA-Z0-9_.\\-]+")

        if self.image is None:
            raise ValueError("image is required")
        self.image.validate()

        if self.max_faces is not None:
            low, high = MAX_FACES_RANGE
            if not (low <= self.max_faces <= high):
                raise ValueError(f"max_faces must be between {low} and {high}")

        if self.face_match_threshold is not None:
            low, high = FACE_MATCH_THRESHOLD_RANGE
            if not (low <= self.face_match_threshold <= high):
                raise ValueError(
                    f"face_match_threshold must be between {low:g} and {high:g}"
                )

    def to_dict(self) -> Dict[str, Any]:
        """JSON request body with unset fields omitted."""
        body: Dict[str, Any] = {}
        if self.collection_id is not None:
            body["CollectionId"] = self.collection_id
        if self.image is not None:
            body["Image"] = self.image.to_dict()
        if self.max_faces is not None:
            body["MaxFaces"] = self.max_faces
        if self.face_match_threshold is not None:
            body["FaceMatchThreshold"] = self.face_match_threshold
        return body
