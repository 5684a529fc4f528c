"""Example of using qolsysclient to send commands to a Qolsys panel."""

import asyncio

from qolsysclient import AlarmMode, Controller, TLSConnection

host = "127.0.0.1"
port = 12346
token = ""
user_code = "1234"


def main(*, use_tls: bool = True) -> None:
    """Send various example commands then exits."""
    loop = asyncio.new_event_loop()
    controller = Controller(
        connection=TLSConnection(host, port, use_tls=use_tls),
        token=token,
        user_code=user_code,
    )

    # Connecting also requests a summary of zones and partitions
    loop.run_until_complete(controller.connect())
    # Arm partition 0 in stay mode, with a 5 second exit delay
    loop.run_until_complete(controller.send_arm_command(AlarmMode.ARM_STAY, 0, 5))
    # Arm partition 0 in away mode, force-arming over open zones
    loop.run_until_complete(
        controller.send_arm_command(AlarmMode.ARM_AWAY, 0, bypass=True)
    )
    # Disarm partition 0
    loop.run_until_complete(controller.send_arm_command(AlarmMode.DISARM, 0))
    # Request a fresh summary
    loop.run_until_complete(controller.refresh())

    loop.run_until_complete(controller.close())
    loop.close()


if __name__ == "__main__":
    main()
