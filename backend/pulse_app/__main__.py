"""Run the service: python -m pulse_app"""

from pulse_app.main import main

main()
