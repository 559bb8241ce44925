from model.note import Note
from model.project import Project
from model.review import Review
from model.target import Target
from model.task import Task
from model.user import User

Models = [User, Project, Task, Note, Target, Review]

USERS = User.collection
PROJECTS = Project.collection
TASKS = Task.collection
NOTES = Note.collection
TARGETS = Target.collection
REVIEWS = Review.collection

for model in Models:
    model.model_rebuild()
