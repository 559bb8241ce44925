from typing import List

from database.store import Query
from model import TARGETS
from model.target import Target
from views.base import View


class TargetsView(View):
    title = "Targets"

    async def bind(self):
        await self.subscriptions.bind(
            "targets", Query(TARGETS).filter("userId", self.identity.user_id), Target, self.changed
        )

    @property
    def targets(self) -> List[Target]:
        return self.subscriptions.items("targets")

    @property
    def progress(self) -> str:
        done = sum(1 for target in self.targets if target.completed)
        return f"{done}/{len(self.targets)}"

    def render(self) -> str:
        lines = [f"## {self.title} ({self.progress})"]
        for target in self.targets:
            lines.append(f"- {'✅' if target.completed else '⬜'} `{target.id}` {target.text}")
        if not self.targets:
            lines.append("*No targets yet.*")
        return "\n".join(lines)
