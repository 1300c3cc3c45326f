from typing import Literal


existing_services = Literal[
    "compute",
    "alarms",
]
