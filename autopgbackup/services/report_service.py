"""
Envío del reporte de fin de ejecución por correo
"""
import smtplib
import socket
import sys
from email.mime.text import MIMEText
from email.utils import formatdate
from ..logger import RunRecorder
from ..models import BackupConfig, BackupPeriod


class ReportService:
    """Compone y envía el reporte cuando hubo advertencias o errores"""

    SEPARATOR = "=" * 70

    def __init__(self, config: BackupConfig):
        self.config = config

    def should_send(self, recorder: RunRecorder, debug: bool) -> bool:
        if debug or not self.config.mail_addr:
            return False
        return recorder.has_errors or recorder.has_warnings

    def compose(self, recorder: RunRecorder, period: BackupPeriod = None) -> MIMEText:
        """
        Arma el mensaje: líneas con problemas, separador y log completo

        Args:
            recorder: Grabador de la ejecución
            period: Periodo de la ejecución (si se llegó a clasificar)

        Returns:
            Mensaje listo para enviar
        """
        host = self.config.host or socket.gethostname()
        subject_period = f"{period} " if period else ""
        body = "\n".join([
            "Errores y advertencias:",
            "",
            *recorder.problems,
            "",
            self.SEPARATOR,
            "Log completo:",
            "",
            recorder.full_log,
        ])

        msg = MIMEText(body, "plain", "utf-8")
        msg["Subject"] = f"[autopgbackup] {subject_period}backup report ({host})"
        msg["From"] = self.config.mail_from or f"autopgbackup@{socket.getfqdn()}"
        msg["To"] = self.config.mail_addr
        msg["Date"] = formatdate(localtime=True)
        return msg

    def send(self, recorder: RunRecorder, period: BackupPeriod = None, debug: bool = False) -> bool:
        """
        Envía el reporte si corresponde

        Un fallo de entrega se informa por stderr y nunca se propaga.

        Returns:
            True si se envió el reporte
        """
        if not self.should_send(recorder, debug):
            return False

        msg = self.compose(recorder, period)
        try:
            with smtplib.SMTP(self.config.smtp_host, self.config.smtp_port, timeout=30) as server:
                server.sendmail(msg["From"], [self.config.mail_addr], msg.as_string())
        except (OSError, smtplib.SMTPException) as e:
            print(f"No se pudo enviar el reporte a {self.config.mail_addr}: {e}", file=sys.stderr)
            return False
        return True
