from sharemyrun.errors import CorruptInput, NotFound, ShareMyRunError, UnsupportedFormat, UploadRejected
from sharemyrun.workouts import CanonicalWorkout, Interpretation, WorkoutStep, interpret, load_workout

__all__ = [
    "CanonicalWorkout",
    "CorruptInput",
    "Interpretation",
    "NotFound",
    "ShareMyRunError",
    "UnsupportedFormat",
    "UploadRejected",
    "WorkoutStep",
    "interpret",
    "load_workout",
]
