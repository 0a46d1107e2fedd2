"""Run the redis-ctrl command line tool."""

from redis_ctrl.tool.redis_ctrl import main

if __name__ == "__main__":
    main()
