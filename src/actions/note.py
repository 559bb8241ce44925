from typing import ClassVar, List, Optional

from result import Err, Ok, Result
from actions.action import Action, Context, viewer
from database.errors import StoreError, describe_error
from database.store import Query
from model import NOTES
from model.note import Note


async def find_note(ctx: Context, note: str) -> Optional[Note]:
    """Find one of the caller's own notes by id or title."""
    uid = viewer(ctx).user_id
    wanted = note.strip().lower()
    for document in await ctx.store.query(Query(NOTES).filter("userId", uid)):
        found = Note.model_validate(document)
        if wanted in (found.id.lower(), found.title.lower()):
            return found
    return None


class NoteNew(Action):
    title: str
    content: str = ""

    unsafe: ClassVar[bool] = False

    async def preflight(self, ctx: Context) -> Result[None, str]:
        if not self.title.strip():
            return Err("Note title is required")
        return Ok(None)

    def preflight_wrap(self, result: Result[None, str]) -> Result[None, str]:
        if result.is_err():
            return Err(result.unwrap_err())
        return Ok(None)

    async def execute(self, ctx: Context) -> Result[Note, StoreError]:
        note = Note(title=self.title.strip(), content=self.content, user_id=viewer(ctx).user_id)
        try:
            note.id = await ctx.store.add(NOTES, note.to_document())
        except StoreError as e:
            return Err(e)
        return Ok(note)

    def execute_wrap(self, result: Result[Note, StoreError]) -> Result[str, str]:
        if result.is_err():
            return Err(describe_error(result.unwrap_err(), "add notes"))
        return Ok(f"Note {result.unwrap().title} created.")

    def __str__(self) -> str:
        return f"**New note**: {self.title}"


class NoteEdit(Action):
    note: str
    content: str

    unsafe: ClassVar[bool] = False

    async def preflight(self, ctx: Context) -> Result[Note, str]:
        if not self.content.strip():
            return Err("Note content cannot be empty")
        try:
            note = await find_note(ctx, self.note)
        except StoreError as e:
            return Err(describe_error(e, "edit this note"))
        if note is None:
            return Err(f"Note {self.note} not found.")
        self._memo["note"] = note
        return Ok(note)

    def preflight_wrap(self, result: Result[Note, str]) -> Result[None, str]:
        if result.is_err():
            return Err(result.unwrap_err())
        return Ok(None)

    async def execute(self, ctx: Context) -> Result[Note, StoreError]:
        note: Note = self._memo["note"]
        try:
            await ctx.store.update(NOTES, note.id, {"content": self.content})
        except StoreError as e:
            return Err(e)
        return Ok(note)

    def execute_wrap(self, result: Result[Note, StoreError]) -> Result[str, str]:
        if result.is_err():
            return Err(describe_error(result.unwrap_err(), "edit this note"))
        return Ok(f"Note {result.unwrap().title} updated.")

    def __str__(self) -> str:
        return f"**Edit note** {self.note}"


class NoteDelete(Action):
    note: str

    unsafe: ClassVar[bool] = False

    async def preflight(self, ctx: Context) -> Result[Note, str]:
        try:
            note = await find_note(ctx, self.note)
        except StoreError as e:
            return Err(describe_error(e, "delete this note"))
        if note is None:
            return Err(f"Note {self.note} not found.")
        self._memo["note"] = note
        return Ok(note)

    def preflight_wrap(self, result: Result[Note, str]) -> Result[None, str]:
        if result.is_err():
            return Err(result.unwrap_err())
        return Ok(None)

    async def execute(self, ctx: Context) -> Result[Note, StoreError]:
        note: Note = self._memo["note"]
        try:
            await ctx.store.delete(NOTES, note.id)
        except StoreError as e:
            return Err(e)
        return Ok(note)

    def execute_wrap(self, result: Result[Note, StoreError]) -> Result[str, str]:
        if result.is_err():
            return Err(describe_error(result.unwrap_err(), "delete this note"))
        return Ok(f"Note {result.unwrap().title} deleted.")

    def __str__(self) -> str:
        return f"**Delete note** {self.note}"


class NoteList(Action):
    unsafe: ClassVar[bool] = False

    async def preflight(self, ctx: Context) -> Result[None, str]:
        return Ok(None)

    def preflight_wrap(self, result: Result[None, str]) -> Result[None, str]:
        return Ok(None)

    async def execute(self, ctx: Context) -> Result[List[Note], StoreError]:
        try:
            documents = await ctx.store.query(
                Query(NOTES).filter("userId", viewer(ctx).user_id)
            )
        except StoreError as e:
            return Err(e)
        return Ok([Note.model_validate(document) for document in documents])

    def execute_wrap(self, result: Result[List[Note], StoreError]) -> Result[str, str]:
        if result.is_err():
            return Err(describe_error(result.unwrap_err(), "load notes"))
        notes = result.unwrap()
        if not notes:
            return Ok("No notes yet.")
        return Ok("**Notes**:\n" + "\n".join(f"- **{n.title}**: {n.content}" for n in notes))

    def __str__(self) -> str:
        return "**List notes**"
