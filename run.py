from bingo import create_app, socketio

app = create_app()
 
if __name__ == '__main__':
    # Use SocketIO server so the realtime mirror and background game loops run
    socketio.run(app, debug=True)
