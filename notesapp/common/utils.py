from flask import jsonify


def success(data=None, status=200):
    return jsonify({"success": True, "data": data, "error": None}), status
