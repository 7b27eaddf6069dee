# Force SQLModel table registration at test discovery time
from arena_pairing.models.pair import Pair  # noqa: F401
from arena_pairing.models.pair_history import PairHistoryRecord  # noqa: F401
from arena_pairing.models.seed_designation import SeedDesignation  # noqa: F401
