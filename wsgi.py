"""
WSGI entry point for edgeconsole
Use this with production WSGI servers like Gunicorn
"""
import os

from edgeconsole import create_app
from edgeconsole.config import DevelopmentConfig, ProductionConfig
from edgeconsole.scheduler import create_scheduler

app = create_app(DevelopmentConfig if os.getenv('FLASK_DEBUG') == '1' else ProductionConfig)

# Start the scheduled-action scan only under a WSGI server, not when run directly
# for development or loaded by the flask CLI.
if __name__ != '__main__' and app.config['SCHEDULER_ENABLED'] and not os.environ.get('FLASK_RUN_FROM_CLI'):
    scheduler = create_scheduler(
        app.extensions['edgeconsole']['schedules'],
        interval_seconds=app.config['SCHEDULE_SCAN_INTERVAL_SECONDS'],
    )
    scheduler.start()
    app.extensions['edgeconsole']['scheduler'] = scheduler

# WSGI application
application = app

if __name__ == '__main__':
    # For development/testing only
    # In production, use: gunicorn -c gunicorn.conf.py wsgi:application
    app.run(host='0.0.0.0', port=app.config['PORT'], debug=False)
