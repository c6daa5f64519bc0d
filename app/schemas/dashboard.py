from pydantic import BaseModel


class DashboardStats(BaseModel):
    total_tickets_created: int = 0
    total_tickets_archived: int = 0
    tickets_created_today: int = 0
    tickets_open_today: int = 0
    tickets_open: int = 0
    tickets_archived_today: int = 0
