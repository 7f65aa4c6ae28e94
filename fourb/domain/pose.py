"""
Pose Domain Models

Data structures for body pose landmarks produced by an upstream pose
estimator using the MediaPipe 33-landmark schema.

MediaPipe Pose landmark reference:
https://developers.google.com/mediapipe/solutions/vision/pose_landmarker
"""
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional


class BodyPart(IntEnum):
    """
    MediaPipe Pose landmark indices.

    Only the landmarks the engine reads are listed; frames still carry
    all 33 points and are indexed by these values.
    """
    # Upper body
    LEFT_SHOULDER = 11
    RIGHT_SHOULDER = 12
    LEFT_ELBOW = 13
    RIGHT_ELBOW = 14
    LEFT_WRIST = 15
    RIGHT_WRIST = 16

    # Hands (bat proxy)
    LEFT_INDEX = 19
    RIGHT_INDEX = 20

    # Lower body
    LEFT_HIP = 23
    RIGHT_HIP = 24
    LEFT_KNEE = 25
    RIGHT_KNEE = 26

    def mirrored(self) -> "BodyPart":
        """Same landmark on the opposite side of the body."""
        name = self.name
        if name.startswith("LEFT_"):
            return BodyPart[name.replace("LEFT_", "RIGHT_", 1)]
        return BodyPart[name.replace("RIGHT_", "LEFT_", 1)]


LANDMARK_COUNT = 33


class Handedness(Enum):
    """Batting side. Landmark roles are defined for a right-handed batter."""
    RIGHT = "right"
    LEFT = "left"


@dataclass(frozen=True)
class PoseLandmark:
    """
    A single body landmark with normalized coordinates and visibility.

    Attributes:
        x: Horizontal position (0.0 = left edge, 1.0 = right edge)
        y: Vertical position (0.0 = top edge, 1.0 = bottom edge)
        z: Depth (smaller = closer to camera)
        visibility: Confidence score (0.0 to 1.0)
    """
    x: float
    y: float
    z: float = 0.0
    visibility: float = 1.0

    def is_visible(self, threshold: float = 0.5) -> bool:
        """Check if landmark is visible at or above confidence threshold."""
        return self.visibility >= threshold


@dataclass(frozen=True)
class PoseFrame:
    """
    One frame of pose estimation output.

    Attributes:
        landmarks: Landmarks ordered by MediaPipe index
        timestamp_ms: Capture timestamp in milliseconds
        frame_number: Sequential frame number
    """
    landmarks: tuple[PoseLandmark, ...]
    timestamp_ms: float
    frame_number: int

    def get_landmark(self, body_part: BodyPart) -> Optional[PoseLandmark]:
        """Get a specific landmark by body part."""
        index = body_part.value
        if 0 <= index < len(self.landmarks):
            return self.landmarks[index]
        return None

    def has_landmark(self, body_part: BodyPart) -> bool:
        return self.get_landmark(body_part) is not None
