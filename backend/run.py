from partyhub import create_app, socketio
from partyhub.store import startup_sweep

app = create_app()

if __name__ == '__main__':
    # No connection survives a restart; clear stale presence and anonymous games
    with app.app_context():
        startup_sweep()
    # Use SocketIO server to enable websockets in dev
    socketio.run(app, debug=True)
