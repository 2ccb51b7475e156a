from dataclasses import dataclass


@dataclass
class Transaction:
    id: str
    description: str
    amount: float
    method: str             # 'DEBIT' | 'CREDIT'
    date: str               # 'YYYY-MM-DD'
    time: str = ""          # 'HH:MM'
    created_at: int = 0     # epoch ms
