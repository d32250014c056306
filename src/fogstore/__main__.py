"""Run the fogstore gateway: python -m fogstore"""

import uvicorn

from fogstore.config import load_config

config = load_config()
uvicorn.run("fogstore.app:create_app", host=config.host, port=config.port, factory=True)
