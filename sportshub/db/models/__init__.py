from sportshub.db.models.coaching_center import CoachingCenter
from sportshub.db.models.highlight import StreamHighlight
from sportshub.db.models.reel import Reel

# Retention sweep order
PURGEABLE_MODELS = (StreamHighlight, Reel, CoachingCenter)

__all__ = ["StreamHighlight", "Reel", "CoachingCenter", "PURGEABLE_MODELS"]
