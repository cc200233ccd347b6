"""Thompson-sampling bandit over candidate items.

Each item is an arm with a Beta(alpha, beta) posterior, starting from the
uniform prior Beta(1, 1). Positive rewards add to alpha and negative rewards
add their magnitude to beta. Selection draws one sample per arm and keeps the
highest draws, so uncertain arms still get shown now and then.
"""
from __future__ import annotations

import random
import time
from dataclasses import asdict, dataclass
from typing import Callable, Iterable

from jobmatch.log import get_logger
from jobmatch.stores import KeyValueStore

log = get_logger(__name__)

BANDIT_KEY_PREFIX = "bandit_arms_"

REWARD_SCORES: dict[str, float] = {
    "view": 0.1,
    "click": 1.0,
    "save": 1.5,
    "apply": 3.0,
    "reject": -2.0,
}


def bandit_key(user_id: str) -> str:
    return f"{BANDIT_KEY_PREFIX}{user_id}"


def action_to_reward(action: str) -> float:
    """Reward for a tracked action; unknown actions are worth 0."""
    return REWARD_SCORES.get(action, 0.0)


@dataclass
class BanditArm:
    item_id: str
    alpha: float = 1.0
    beta: float = 1.0
    total_pulls: int = 0
    total_reward: float = 0.0
    last_updated: float = 0.0

    @property
    def expected_value(self) -> float:
        return self.alpha / (self.alpha + self.beta)

    @property
    def average_reward(self) -> float:
        return self.total_reward / self.total_pulls if self.total_pulls else 0.0

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, record: dict) -> BanditArm:
        return cls(
            item_id=str(record["item_id"]),
            alpha=float(record.get("alpha", 1.0)),
            beta=float(record.get("beta", 1.0)),
            total_pulls=int(record.get("total_pulls", 0)),
            total_reward=float(record.get("total_reward", 0.0)),
            last_updated=float(record.get("last_updated", 0.0)),
        )


class ThompsonSamplingBandit:
    def __init__(
        self,
        arms: Iterable[BanditArm] = (),
        rng: random.Random | None = None,
    ) -> None:
        self.arms: dict[str, BanditArm] = {arm.item_id: arm for arm in arms}
        self.rng = rng or random.Random()

    def add_arm(self, item_id: str) -> BanditArm:
        if item_id not in self.arms:
            self.arms[item_id] = BanditArm(item_id, last_updated=time.time())
        return self.arms[item_id]

    def remove_arm(self, item_id: str) -> None:
        self.arms.pop(item_id, None)

    def reset(self) -> None:
        self.arms.clear()

    def select_arms(self, count: int) -> list[str]:
        """Up to *count* item ids, ordered by one posterior draw per arm."""
        if count <= 0 or not self.arms:
            return []
        draws = [
            (self.rng.betavariate(arm.alpha, arm.beta), item_id)
            for item_id, arm in self.arms.items()
        ]
        draws.sort(key=lambda d: -d[0])
        return [item_id for _, item_id in draws[:count]]

    def update_reward(self, item_id: str, reward: float) -> bool:
        """Fold *reward* into the arm's posterior; False when the arm is unknown."""
        arm = self.arms.get(item_id)
        if arm is None:
            log.warning("No bandit arm for item %s", item_id)
            return False
        if reward > 0:
            arm.alpha += reward
        else:
            arm.beta += abs(reward)
        arm.total_pulls += 1
        arm.total_reward += reward
        arm.last_updated = time.time()
        return True

    def update_rewards(self, updates: Iterable[tuple[str, float]]) -> None:
        for item_id, reward in updates:
            self.update_reward(item_id, reward)

    def expected_value(self, item_id: str) -> float:
        arm = self.arms.get(item_id)
        return arm.expected_value if arm else 0.0

    def average_reward(self, item_id: str) -> float:
        arm = self.arms.get(item_id)
        return arm.average_reward if arm else 0.0

    def top_arms(self, count: int) -> list[BanditArm]:
        """Arms with the highest posterior mean; no sampling involved."""
        ranked = sorted(self.arms.values(), key=lambda a: (-a.expected_value, a.item_id))
        return ranked[:count]

    def serialize(self) -> list[dict]:
        return [arm.to_dict() for arm in self.arms.values()]

    @classmethod
    def deserialize(
        cls, records: Iterable[dict], rng: random.Random | None = None
    ) -> ThompsonSamplingBandit:
        arms: list[BanditArm] = []
        for record in records:
            try:
                arms.append(BanditArm.from_dict(record))
            except (KeyError, TypeError, ValueError) as exc:
                log.warning("Skipping bad bandit arm: %s", exc)
        return cls(arms, rng=rng)


def simulate(
    arm_count: int,
    iterations: int,
    reward_for: Callable[[int], float],
    rng: random.Random | None = None,
) -> dict:
    """Run the bandit against *reward_for(arm_index)*; reports total reward and regret."""
    bandit = ThompsonSamplingBandit(rng=rng)
    for i in range(arm_count):
        bandit.add_arm(f"arm-{i}")
    best = max(reward_for(i) for i in range(arm_count))

    total = 0.0
    regret = 0.0
    for _ in range(iterations):
        chosen = bandit.select_arms(1)[0]
        reward = reward_for(int(chosen.split("-")[1]))
        bandit.update_reward(chosen, reward)
        total += reward
        regret += best - reward
    return {"total_reward": total, "regret": regret, "arms": list(bandit.arms.values())}


class BanditManager:
    """Per-user bandits kept in a key-value store under ``bandit_arms_<user>``."""

    def __init__(self, store: KeyValueStore, rng: random.Random | None = None) -> None:
        self.store = store
        self.rng = rng
        self._bandits: dict[str, ThompsonSamplingBandit] = {}

    def get_bandit(self, user_id: str) -> ThompsonSamplingBandit:
        if user_id not in self._bandits:
            stored = self.store.get(bandit_key(user_id)) or []
            if not isinstance(stored, list):
                log.warning("Bandit state for %s is not a list, starting fresh", user_id)
                stored = []
            self._bandits[user_id] = ThompsonSamplingBandit.deserialize(stored, rng=self.rng)
        return self._bandits[user_id]

    def save_bandit(self, user_id: str, bandit: ThompsonSamplingBandit | None = None) -> None:
        bandit = bandit or self.get_bandit(user_id)
        self._bandits[user_id] = bandit
        self.store.set(bandit_key(user_id), bandit.serialize())

    def remove_bandit(self, user_id: str) -> None:
        self._bandits.pop(user_id, None)
        self.store.set(bandit_key(user_id), [])

    def recommend(self, user_id: str, candidate_ids: Iterable[str], count: int = 10) -> list[str]:
        """Thompson-sample *count* ids among the candidates; new ids start at the prior."""
        bandit = self.get_bandit(user_id)
        candidates = list(dict.fromkeys(candidate_ids))
        pool = ThompsonSamplingBandit((bandit.add_arm(c) for c in candidates), rng=bandit.rng)
        selected = pool.select_arms(min(count, len(candidates)))
        log.info("Bandit picked %d of %d candidates for %s", len(selected), len(candidates), user_id)
        return selected

    def record_action(self, user_id: str, item_id: str, action: str) -> float:
        """Reward the arm for *action* and persist the user's bandit."""
        bandit = self.get_bandit(user_id)
        bandit.add_arm(item_id)
        reward = action_to_reward(action)
        bandit.update_reward(item_id, reward)
        self.save_bandit(user_id, bandit)
        return reward
