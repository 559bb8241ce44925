from typing import List, Optional

from database.store import Query
from model import NOTES
from model.note import Note
from views.base import View


class NotesView(View):
    title = "Notes"

    async def bind(self):
        await self.subscriptions.bind(
            "notes", Query(NOTES).filter("userId", self.identity.user_id), Note, self.changed
        )

    @property
    def notes(self) -> List[Note]:
        return self.subscriptions.items("notes")

    def find(self, title: str) -> Optional[Note]:
        wanted = title.strip().lower()
        return next((note for note in self.notes if note.title.lower() == wanted), None)

    def render(self) -> str:
        if not self.notes:
            return f"## {self.title}\n*No notes yet.*"
        return f"## {self.title}\n" + "\n".join(
            f"**{note.title}**\n{note.content}" for note in self.notes
        )
