# vidtube/models/watch_history.py
from tortoise import fields, models


class WatchHistory(models.Model):
    id = fields.IntField(pk=True)
    user = fields.ForeignKeyField("models.User", related_name="watch_history", on_delete=fields.CASCADE)
    video = fields.ForeignKeyField("models.Video", related_name="watched_by", on_delete=fields.CASCADE)

    position = fields.IntField()  # Insertion order within the user's history
    watched_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "watch_history"
        unique_together = (("user", "position"),)
        ordering = ["position", "id"]
